from .models import TERMINAL_EVENTS, AuditEvent, AuditEventType
from .emitter import AuditEventEmitter, NullEventEmitter, emit_safely
from .memory_emitter import MemoryQueueEventEmitter

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "TERMINAL_EVENTS",
    "AuditEventEmitter",
    "NullEventEmitter",
    "MemoryQueueEventEmitter",
    "emit_safely",
]
