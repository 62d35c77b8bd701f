"""
Infrastructure layer.

Concrete implementations of the application ports.

Structure:
- cache/: TTL cache for provider responses
- gateways/: HTTP providers (httpx) and the Stripe payment processor
- in_memory/: In-memory providers for development and tests
- services/: Transport security
- circuit_breaker.py: pybreaker breakers for external providers
"""
