"""Example: Log in and browse live broadcasts against the mock backend.

Prerequisites:
    1. Install dependencies: pip install -e ".[mock]"
    2. Start the mock backend:
       granian --interface ASGI --host 127.0.0.1 --port 18090 tools.mock_noise_api:app
    3. Point the client at it in env.local (do not commit):
       NOISE_API_BASE_URL=http://127.0.0.1:18090/api/v1/

Run:
    python examples/api_client_example.py
"""

import asyncio

from noise.app_config import get_noise_environ_config
from noise.errors import APIClientError
from noise.log import init_logger
from noise.main import NoiseApp


async def main():
    settings = get_noise_environ_config()
    init_logger(settings.DEBUG)
    app = NoiseApp.create(settings)

    print("Noise API Client Example")
    print("=" * 50)

    try:
        user = await app.restore_session()
        if user is None:
            print("\n1. No stored session, logging in as demo@noise.app")
            login = app.login_view_model()
            login.email, login.password = "demo@noise.app", "password"
            user = await login.login()
            if user is None:
                print(f"   Error: {login.error_message}")
                return
        else:
            print("\n1. Restored stored session")
        print(f"   Signed in as {user.username} ({user.followers_count} followers)")

        print("\n2. Live now:")
        feed = app.home_feed_view_model()
        await feed.fetch_feed()
        if feed.error_message:
            print(f"   Error: {feed.error_message}")
        for broadcast in feed.live_broadcasts:
            print(f"   - {broadcast.title or '(untitled)'} by {broadcast.username}: {broadcast.viewer_count} watching")

        print("\n3. Starting a live stream:")
        try:
            stream = await app.api_client.start_live_stream("Example stream")
            print(f"   Channel {stream.channel}, uid {stream.agora_uid}, credential expires in {stream.expires_in}s")
        except APIClientError as e:
            print(f"   Error: {e}")
    finally:
        await app.aclose()


if __name__ == "__main__":
    asyncio.run(main())
