"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Session, Activity, TaskStatus)
- task_errors.py: error taxonomy raised by the store
- session_ledger.py: pure duration math over closed sessions
- task_store.py: the task collection + timer state machine
- task_scheduler.py: 1 Hz ticker refreshing the running session display
- task_export.py: JSON / CSV projections of the collection
- task_api.py: small view helpers used by the console front-end
"""
