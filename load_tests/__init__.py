"""
Load testing package (Locust-based) for the business GraphQL API.

Contains the Locust user classes, load shapes, response checks, run
hooks and a CI threshold checker that together exercise the
``business.abilities`` query on ``/api/v1.0/graph``.

Two load profiles are available, selected with ``LOAD_PROFILE``:

- ``constant`` — fixed arrival rate kept under the API rate limit
- ``ramp`` — stepped concurrency with a one-second pause per iteration

Key Concepts Demonstrated:
- Named response checks combined into a per-iteration verdict
- Custom error-rate metric recorded through Locust request events
- Custom ``LoadTestShape`` classes for arrival-rate and ramp profiles
- YAML threshold gates evaluated in-process and from CSV output
"""
