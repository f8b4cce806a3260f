from task_api.routers import health, tasks


__all__ = ["health", "tasks"]
