"""
WebSocket Relay Client Example for Testing
Authenticates, answers keepalive pings and prints broadcasts
"""

import argparse
import asyncio
import json
import sys
import time
from typing import Optional

import websockets

from relay.constants import (
    MESSAGE_TYPE_AUTH,
    MESSAGE_TYPE_BROADCAST,
    MESSAGE_TYPE_ERROR,
    PING_TOKEN,
    PONG_TOKEN,
)


class RelayClient:
    """WebSocket relay client for manual testing"""

    def __init__(self, server_url: str = "ws://localhost:5001/", origin: Optional[str] = None):
        self.server_url = server_url
        self.origin = origin
        self.websocket = None
        self.authenticated = False
        self.running = False

    async def connect(self) -> bool:
        """Connect to the relay"""
        try:
            self.websocket = await websockets.connect(self.server_url, origin=self.origin)
            print(f"✅ Connected to {self.server_url}")
            return True
        except (OSError, websockets.exceptions.WebSocketException) as e:
            print(f"❌ Connection failed: {e}")
            return False

    async def authenticate(self, password: Optional[str]) -> bool:
        """
        Authenticate by origin or password

        An allowed origin is acknowledged right after connecting; otherwise
        the password is sent as the first message.
        """
        if not self.websocket:
            return False

        try:
            if self.origin:
                try:
                    reply = await asyncio.wait_for(self.websocket.recv(), timeout=1.0)
                    if self._handle_auth(json.loads(reply)):
                        return True
                except asyncio.TimeoutError:
                    pass

            if not password:
                print("❌ Origin not accepted and no password given")
                return False

            await self.websocket.send(password)
            reply = await self.websocket.recv()
            return self._handle_auth(json.loads(reply))

        except websockets.exceptions.ConnectionClosed as e:
            print(f"🔌 Connection closed during authentication: {e.code} {e.reason}")
            return False

    def _handle_auth(self, data: dict) -> bool:
        if data.get("type") != MESSAGE_TYPE_AUTH:
            print(f"❓ Unexpected response: {data}")
            return False

        if data.get("status") == "success":
            self.authenticated = True
            print(f"✅ Authenticated via {data.get('method')}")
            return True

        print(f"❌ {data.get('message')}")
        return False

    async def send_message(self, message: str) -> bool:
        """Send a message for fan-out"""
        if not self.websocket:
            return False

        try:
            await self.websocket.send(message)
            print(f"📤 Message sent: {message}")
            return True
        except websockets.exceptions.ConnectionClosed as e:
            print(f"❌ Send failed: {e}")
            return False

    async def listen_for_messages(self):
        """Listen for broadcasts and keepalive pings"""
        while self.running:
            try:
                raw = await asyncio.wait_for(self.websocket.recv(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            except websockets.exceptions.ConnectionClosed:
                print("🔌 Connection closed by server")
                break

            if raw == PING_TOKEN:
                await self.websocket.send(PONG_TOKEN)
                continue

            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                print(f"❓ Non-JSON message: {raw}")
                continue

            msg_type = data.get("type")
            if msg_type == MESSAGE_TYPE_BROADCAST:
                timestamp = data.get("timestamp", 0)
                print(f"📨 [{time.strftime('%H:%M:%S', time.localtime(timestamp))}] {data.get('message', '')}")
            elif msg_type == MESSAGE_TYPE_ERROR:
                print(f"❌ Server error: {data.get('message', 'Unknown error')}")
            else:
                print(f"❓ Unknown message type: {msg_type}")

    async def disconnect(self):
        """Disconnect from the relay"""
        self.running = False
        if self.websocket:
            await self.websocket.close()
            print("🔌 Disconnected from server")

    async def run_interactive(self, password: Optional[str]):
        """Run an interactive relay session"""
        if not await self.connect():
            return

        if not await self.authenticate(password):
            await self.disconnect()
            return

        self.running = True
        listen_task = asyncio.create_task(self.listen_for_messages())

        try:
            print("\n🎮 Interactive mode started! Type /quit to leave")
            print("-" * 50)

            while self.running:
                try:
                    user_input = (await asyncio.to_thread(input, "> ")).strip()
                except (KeyboardInterrupt, EOFError):
                    break

                if not user_input:
                    continue
                if user_input == "/quit":
                    break
                await self.send_message(user_input)

        finally:
            self.running = False
            listen_task.cancel()
            await self.disconnect()


async def main():
    """Main function with command line interface"""
    parser = argparse.ArgumentParser(description="WebSocket Relay Client")
    parser.add_argument("--server", default="ws://localhost:5001/", help="Relay URL")
    parser.add_argument("--origin", help="Origin header to present")
    parser.add_argument("--password", help="Shared relay password")

    args = parser.parse_args()

    client = RelayClient(args.server, args.origin)
    await client.run_interactive(args.password)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Client error: {e}")
        sys.exit(1)
