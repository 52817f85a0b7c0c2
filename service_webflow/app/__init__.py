"""Webflow service application package."""
