"""
Domain layer - Business logic and domain models.

This layer contains:
- Value objects (immutable, self-validating)
- Domain entities (User aggregate with its owned Address)
- Validation rules
- Domain exceptions
- The UserDomainService orchestrating the user lifecycle

No dependencies on web frameworks; persistence is reached only through
the repository port in user_service.core.interfaces.
"""
