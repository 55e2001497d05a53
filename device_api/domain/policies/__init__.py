from .lifecycle_policy import Allowed, Decision, Denied, LifecyclePolicy, LOCKED_FIELDS

__all__ = ["Allowed", "Decision", "Denied", "LifecyclePolicy", "LOCKED_FIELDS"]
