"""Health subsystem — models, normalizer, classifier."""

from .classifier import classify
from .models import HealthRecord, HealthStatus, RuntimeState
