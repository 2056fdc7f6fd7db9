# Services package init
"""
SConf Backend - Services Layer
==============================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services accept validated request schemas, run queries through the
       entity store, and return response schemas built by the formatters.

Service Inventory:
    - query_shaper: pagination / filter / sort contract shared by list endpoints
    - EntityStore: generic async CRUD over one ORM model, with tagged errors
    - formatters: ORM rows → response schemas, nested allow-lists
    - ScientistService, ConferenceService (+ country statistics),
      ParticipationService (+ metadata search, bulk status update)
"""
