"""Domain layer for timebill application.

Services are imported from their modules (``timebill.domain.invoice`` etc.)
so that ``timebill.database`` can import the entities without a cycle.
"""
