"""
Locust scenario user classes.

:mod:`.business_abilities` defines one concrete ``HttpUser`` per load
profile plus the ``SCENARIOS`` table the locustfile uses to pick the
user class and load shape for the active profile.  Both concrete users
inherit the per-iteration request and checks from the abstract class
in :mod:`.base`.
"""
