"""
Entities package.

- shared/: settings-bound database session, SQL guard, errors
- tasks/: executors for the predefined database tasks
- agent/: tool facade, ChatAgent construction, and the MySQLAgent service
"""
