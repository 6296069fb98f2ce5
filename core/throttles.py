from rest_framework.throttling import SimpleRateThrottle


class LoginRateThrottle(SimpleRateThrottle):
    scope = 'login'

    def get_cache_key(self, request, view):
        ident = self.get_ident(request)

        # Per IP and per credential
        credential = request.data.get('phone') or request.data.get('email') or ''
        if credential:
            return f"login_throttle_{ident}_{credential}"
        return f"login_throttle_{ident}"
