"""Earthquake dashboard: filter and map the USGS past-day feed."""
