"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Recurrence, SortKey)
- date_rules.py: date parsing, overdue/due-soon status, recurrence rollover
- task_store.py: ordered in-memory collection + mutations
- action_log.py: bounded undo log of inverse actions
- persistence.py: tab-separated record file + background save worker
"""
