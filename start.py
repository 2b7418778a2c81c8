"""Agent Generator launcher. Run: python start.py [--host HOST] [--port PORT]"""

import sys

import uvicorn

from agent_generator.runtime_config import server_host, server_port


def _arg_value(flag: str) -> str:
    for idx, token in enumerate(sys.argv[1:], start=1):
        if token == flag and idx + 1 < len(sys.argv):
            return sys.argv[idx + 1].strip()
        if token.startswith(f"{flag}="):
            return token.split("=", 1)[1].strip()
    return ""


def main():
    host = _arg_value("--host") or server_host()
    port_text = _arg_value("--port")
    port = int(port_text) if port_text.isdigit() else server_port()
    print(f"Agent Generator listening on http://{host}:{port}")
    uvicorn.run("agent_generator.main:app", host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
