"""Encoders for the Log Sink file format and the HTTP wire format."""
