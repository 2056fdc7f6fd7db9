"""
SConf Backend - Nested Relation Summaries
=========================================

What:  The allow-listed subsets of related entities exposed when a record is
       returned together with its relations (participation with details,
       conference with participations).
Why:   A nested relation never exposes the full related record; only the
       fields declared here reach the client.
"""

from datetime import datetime

from sconf.schemas.common import CamelModel


class ScientistSummary(CamelModel):
    id: int
    full_name: str
    country: str
    organization: str


class ConferenceSummary(CamelModel):
    id: int
    name: str
    topic: str
    date: datetime
    country: str
    location: str
