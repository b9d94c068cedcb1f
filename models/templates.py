import json

from models import fields
from models.cache import CacheManager
from models.sheets import CACHE_TTL_TEMPLATE

DEFAULT_TEMPLATE = 'check-in successful; name: {{%s}}, serial: {{%s}}' % (fields.NAME, fields.SERIAL)


def _decode(stored):
    """Stored templates are JSON strings; anything else is used verbatim"""
    try:
        decoded = json.loads(stored)
    except ValueError:
        return stored
    return decoded if isinstance(decoded, str) else stored


class MessageTemplates:
    """
    Confirmation message template, read through three layers:
    the in-memory copy, a TTL cache, then the settings store.
    Falls back to DEFAULT_TEMPLATE when nothing is stored.
    """

    def __init__(self, config, cache=None, ttl=CACHE_TTL_TEMPLATE, key=fields.MSG_TEMPLATE_KEY):
        self.config = config
        self.cache = cache if cache is not None else CacheManager(default_ttl=ttl)
        self.ttl = ttl
        self.key = key
        self._current = None

    def get(self):
        if self._current is not None:
            return self._current

        stored = self.cache.get_fresh(self.key)
        if stored is None:
            stored = self.config.get(self.key)
            if stored:
                self.cache.set(self.key, stored, ttl=self.ttl)

        self._current = _decode(stored) if stored else DEFAULT_TEMPLATE
        return self._current

    def update(self, template):
        if not isinstance(template, str):
            return {'success': False, 'message': 'template must be a string'}

        try:
            stored = json.dumps(template)
            self.config.set(self.key, stored)
        except Exception as e:
            print(f"[TEMPLATE] ❌ Update failed: {e}")
            return {'success': False, 'message': f'template update failed: {e}'}

        self.cache.set(self.key, stored, ttl=self.ttl)
        self._current = template
        print("[TEMPLATE] 📝 Message template updated")
        return {'success': True, 'message': 'message template updated'}

    def forget(self):
        """Drop the in-memory copy and cached value so the next get() reads storage"""
        self._current = None
        self.cache.invalidate(self.key)
