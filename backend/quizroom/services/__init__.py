"""Quiz room domain services.

Data access for users, rooms, memberships, questions and the answer ledger,
plus the workflow that ties them together. HTTP routes import from here,
keeping transport concerns separated from the room lifecycle itself.
"""
