from league_backend import Envelope, ServerlessHandler, process_send_email


class handler(ServerlessHandler):
    def process(self, method: str, raw_body: bytes) -> Envelope:
        return process_send_email(method, raw_body)
