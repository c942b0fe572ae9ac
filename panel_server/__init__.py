"""
Lighting panel server: authenticated proxy for Govee cloud lighting control.
"""
