"""
Domain Layer - Domain-Driven Design (DDD)

This layer contains the skill proficiency and verification rules, independent
of storage and delivery.

Components:
- skills/: Skill records, proficiency scoring, verification, ledgers and matching
- shared/: Base models and the error taxonomy shared across subdomains
"""
