"""Chat providers with tool calling"""
