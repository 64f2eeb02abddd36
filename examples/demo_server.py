#!/usr/bin/env python3
"""
Minimal md_api server for trying out the client.

Implements the session methods, multicall and a couple of user methods
with in-memory data.

Usage:
    1) Install dependencies: pip install aiohttp
    2) Start server: python examples/demo_server.py
    3) Run client: python examples/demo_client.py
"""

import asyncio
import json
import os
import secrets
import sys
from aiohttp import web

# Add parent directory to path to import md_api_client
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from md_api_client.digest import digest, password_hash


# Simple in-memory data
ACCOUNTS = {
    'ada': password_hash('ada', 'analytical-engine'),
    'alan': password_hash('alan', 'enigma'),
}

PROFILES = {
    'ada': {'name': 'Ada Lovelace', 'bio': 'Mathematician & first programmer'},
    'alan': {'name': 'Alan Turing', 'bio': 'Mathematician & computer science pioneer'},
}

challenges = set()
sessions = {}


def ok(data=None):
    return {'success': True, 'data': data}


def fail(msg):
    return {'success': False, 'msg': msg}


def request_login_token(params):
    token = secrets.token_hex(16)
    challenges.add(token)
    return ok({'token': token})


def login(params):
    username = params.get('username', '')
    stored = ACCOUNTS.get(username)
    for challenge in list(challenges):
        if stored and digest(stored, challenge) == params.get('password_hash'):
            challenges.discard(challenge)
            token = secrets.token_hex(16)
            sessions[token] = username
            return ok({'session': {'token': token, 'user': username}})
    return fail('Invalid credentials')


def logout(params):
    if sessions.pop(params.get('token'), None) is None:
        return fail('Not logged in')
    return ok()


def keep_alive(params):
    return ok() if params.get('token') in sessions else fail('Not logged in')


def profile(params):
    user = sessions.get(params.get('token'))
    if user is None:
        return fail('Not logged in')
    return ok(PROFILES[user])


def multicall(params):
    responses = []
    for call in json.loads(params['content'])['calls']:
        method = call.pop('method')
        breaking = call.pop('breaking', False)
        call.setdefault('token', params.get('token'))
        response = run(method, call)
        responses.append(response)
        if breaking and not response['success']:
            break
    return ok({'responses': responses})


METHODS = {
    'session/request_login_token': request_login_token,
    'session/login': login,
    'session/logout': logout,
    'session/keep_alive': keep_alive,
    'user/profile': profile,
    'multicall/multicall': multicall,
}


def run(method, params):
    handler = METHODS.get(method)
    if handler is None:
        return fail(f'Unknown method {method}')
    return handler(params)


async def handle(request):
    """Handle POST /<method> requests."""
    params = dict(await request.post())
    return web.json_response(run(request.match_info['method'], params))


async def main():
    """Start the HTTP server."""
    port = int(os.environ.get('PORT', '3000'))

    app = web.Application()
    app.router.add_post('/{method:.+}', handle)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, 'localhost', port)
    await site.start()

    print(f'md_api server listening on http://localhost:{port}')

    # Keep the server running
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print('\nShutting down server...')
