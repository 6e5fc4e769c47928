"""
Station infrastructure layer.

Adapters for the outside world: JWT signing, the MQTT transport,
scheduling and process shutdown.
"""
