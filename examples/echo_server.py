"""Small demo server: ``python examples/echo_server.py`` then

    boxcar methods http://127.0.0.1:8080/
    boxcar call http://127.0.0.1:8080/ echo.say hello
    boxcar call http://127.0.0.1:8080/ calc.add 2 3
"""

from datetime import datetime

from boxcar import RpcServer, exposed


class Echo:
    def say(self, text: str) -> str:
        """Return the text unchanged."""
        return text

    def now(self) -> datetime:
        """Server time, second precision."""
        return datetime.now().replace(microsecond=0)


@exposed
class Calc:
    @exposed
    def add(self, a: float, b: float) -> float:
        """Add two numbers."""
        return a + b

    @exposed
    def divide(self, a: float, b: float) -> float:
        return a / b

    def reset(self) -> bool:
        # not exposed: only marked methods of a marked class are callable
        return True


if __name__ == "__main__":
    server = RpcServer(8080, "127.0.0.1")
    server.add("echo", Echo())
    server.add("calc", Calc())
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
