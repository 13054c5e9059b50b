"""Exit requests: submission, dual approval and department-scoped views."""
