from league_backend import Envelope, ServerlessHandler, public_config_response


class handler(ServerlessHandler):
    def process(self, method: str, raw_body: bytes) -> Envelope:
        return public_config_response(method)
