# core/middleware.py
from urllib.parse import parse_qs
from django.utils.deprecation import MiddlewareMixin
from channels.middleware import BaseMiddleware
from channels.db import database_sync_to_async
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.tokens import AccessToken
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from django.contrib.auth import get_user_model

User = get_user_model()


class UTF8Middleware(MiddlewareMixin):
    def process_response(self, request, response):
        if response.get('Content-Type', '').startswith('application/json'):
            if 'charset=utf-8' not in response['Content-Type'].lower():
                response['Content-Type'] = 'application/json; charset=utf-8'
        return response


class JWTAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        # Websocket clients pass the access token as ?token=
        query_string = scope.get('query_string', b'').decode()
        token = parse_qs(query_string).get('token', [''])[0]

        if token:
            try:
                access_token = AccessToken(token)
                scope['user'] = await self.get_user(access_token['user_id'])
            except (InvalidToken, TokenError, KeyError):
                scope['user'] = AnonymousUser()
        else:
            scope['user'] = AnonymousUser()

        return await super().__call__(scope, receive, send)

    @database_sync_to_async
    def get_user(self, user_id):
        try:
            return User.objects.get(id=user_id, is_active=True)
        except User.DoesNotExist:
            return AnonymousUser()
