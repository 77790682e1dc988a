class GraphError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class CycleError(GraphError):
    def __init__(self, tasks: list[str]):
        super().__init__("Circular dependency detected between tasks: " + ", ".join(tasks))
        self.tasks = tasks
