# Routes package init
"""
SConf Backend - API Routes Package
==================================

What:  HTTP route handlers; every resource router is mounted under
       settings.api_prefix (default /api).

Route Inventory:
    - scientists.py:      /scientists, /scientists/{id}
    - conferences.py:     /conferences, /conferences/stats, /conferences/{id}
    - participations.py:  /participations, /participations/search,
                          /participations/with-details,
                          /participations/bulk-update-status,
                          /participations/{id}
    - health.py:          /health

Routes are thin: they extract request data, call a service and return its
response model. Business logic lives in sconf.services.
"""
