#!/usr/bin/env python3
"""
Client demonstrating login, single calls and multicall.

Usage (separate terminal from server):
    python examples/demo_client.py
"""

import asyncio
import logging
import os
import sys

# Add parent directory to path to import md_api_client
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from md_api_client import ApiClient, ApiClientError, CallDescriptor

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_URL = os.environ.get('MD_API_URL', 'http://localhost:3000')


async def main():
    async with ApiClient(API_URL) as client:
        # Applications should store the derived hash; the demo derives it on the fly
        session = await client.login('ada', 'analytical-engine', password_is_hashed=False)
        print(f'Logged in, session token {session.token[:8]}...')
        client.start_keep_alive()

        profile = await client.call('user/profile')
        print(f'Profile: {profile}')

        print('\n--- Multicall (one round trip) ---')
        result = await client.multicall([
            CallDescriptor('user/profile',
                           on_success=lambda data: print(f'profile ok: {data["name"]}'),
                           on_error=lambda envelope: print(f'profile failed: {envelope.msg}')),
            CallDescriptor('user/delete', breaking=True),
            CallDescriptor('session/keep_alive'),
        ])
        for item in result:
            print(f'{item.descriptor.method}: {type(item).__name__}')

        client.stop_keep_alive()
        await client.logout()
        print('\nLogged out')


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except ApiClientError as e:
        logger.error(f'API call failed: {e}')
        sys.exit(1)
