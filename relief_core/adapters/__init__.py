"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Geocoding services (Google Maps, Nominatim, static fallback table)
- Location extraction (Gemini, keyword heuristic)
- Caching systems (in-memory, null, background sweeper)
- Record storage (in-memory, versioned)
- Real-time transports
"""
