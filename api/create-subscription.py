from league_backend import Envelope, ServerlessHandler, process_create_subscription


class handler(ServerlessHandler):
    def process(self, method: str, raw_body: bytes) -> Envelope:
        return process_create_subscription(method, raw_body)
