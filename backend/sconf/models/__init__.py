"""
SConf Backend - ORM Models
==========================

Importing this package registers every table with `Base.metadata`
(required by Alembic autogenerate and by `metadata.create_all` in tests).
"""

from sconf.models.conference import Conference
from sconf.models.participation import Participation
from sconf.models.scientist import Scientist

__all__ = ["Conference", "Participation", "Scientist"]
