from opal import callable_method


class HealthOps:
    @callable_method("Report service health", read_only=True)
    def ping(self) -> str:
        return "pong"
