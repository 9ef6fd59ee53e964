"""Red Light game domain services.

Session store, roster, offline reaper, elimination orderer, round director and
scoring bridge. Imported by HTTP routes and socket handlers, keeping transport
concerns separated from the round/elimination engine.
"""
