"""Camera node runtime: binary messages, bounded containers, ring buffers, topic routing, request/reply, media and cloud services, and Linux and RTOS platform layers."""

__version__ = "0.1.0"