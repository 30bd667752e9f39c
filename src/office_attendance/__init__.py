"""Office Attendance package.

Feature modules (offices, attendance, reports) each keep a repository
interface, its storage implementations and a service; Flask controllers stay
thin and only translate HTTP to service calls.
"""
