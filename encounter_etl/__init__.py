"""Clinical encounter note → US Core Encounter FHIR resource ETL."""

__version__ = "1.0.0"
