"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, FilterType, AiSuggestion)
- task_store.py: pure collection operations + the owning TaskStore
- task_tree.py: filtered, sorted two-level tree for display
- breakdown.py: AI subtask regeneration (subtree synchronizer)
- task_import.py: validation and id-based merge of external task lists
- backup.py: JSON backup export/import files
"""
