"""Transports that carry frames to the device."""
