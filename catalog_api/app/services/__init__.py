"""
Service layer abstraction.

Services encapsulate business logic.  ``ItemService`` runs queries over
a store snapshot so API handlers never reach into the store directly.
"""
