"""GTFS endpoints: vehicle positions, routes and static archive members."""
