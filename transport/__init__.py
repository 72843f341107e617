"""Messaging transports."""
