#!/usr/bin/env python3
"""
Startup script for container deployment.
Runs the uvicorn API server and forwards shutdown signals to it.
"""
import os
import sys
import subprocess
import signal

process = None


def start_uvicorn():
    """Start uvicorn server"""
    port = os.environ.get('PORT', '8000')
    workers = os.environ.get('WEB_CONCURRENCY', '2')
    print(f"Starting uvicorn on port {port} with {workers} workers")

    proc = subprocess.Popen(
        [
            'uvicorn', 'ecologic.main:app',
            '--host', '0.0.0.0',
            '--port', port,
            '--workers', workers,
        ],
        cwd=os.path.dirname(os.path.abspath(__file__))
    )
    print(f"Uvicorn started with PID {proc.pid}")
    return proc


def signal_handler(signum, frame):
    """Handle shutdown signals"""
    print(f"Received signal {signum}, shutting down...")
    if process and process.poll() is None:
        process.terminate()
        try:
            process.wait(timeout=10)
        except subprocess.TimeoutExpired:
            process.kill()
    sys.exit(0)


def main():
    global process

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    process = start_uvicorn()

    try:
        process.wait()
    except KeyboardInterrupt:
        pass
    finally:
        signal_handler(signal.SIGTERM, None)


if __name__ == '__main__':
    main()
