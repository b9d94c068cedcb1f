import time
from datetime import datetime
from collections import deque

# Metrics storage
_metrics = {
    'total_reads': 0,
    'total_writes': 0,
    'total_bytes': 0,
    'cache_hits': 0,
    'cache_misses': 0,
    'rate_limit_errors': 0,
    'checkins_succeeded': 0,
    'checkins_not_found': 0,
    'checkins_failed': 0,
    'lock_timeouts': 0,
    'lock_wait_total': 0.0,
    'recent_calls': deque(maxlen=100),
}

def _format_bytes(num_bytes):
    """Format bytes as human-readable string"""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    elif num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f}KB"
    else:
        return f"{num_bytes / (1024 * 1024):.2f}MB"

def log_api_call(operation, sheet_name, size_bytes=None, source='google'):
    """Log an API call for metrics. source is 'google' or 'cache'"""
    now = time.time()
    call_record = {
        'time': now,
        'timestamp': datetime.now().strftime('%H:%M:%S'),
        'operation': operation,
        'sheet': sheet_name,
        'size_bytes': size_bytes,
        'source': source
    }
    _metrics['recent_calls'].append(call_record)

    if source == 'cache':
        _metrics['cache_hits'] += 1
    elif operation == 'read':
        _metrics['cache_misses'] += 1
        _metrics['total_reads'] += 1
        if size_bytes:
            _metrics['total_bytes'] += size_bytes
    else:
        _metrics['total_writes'] += 1

    size_str = f" | Size: {_format_bytes(size_bytes)}" if size_bytes else ""
    source_icon = "⚡CACHE" if source == 'cache' else "🌐GOOGLE"
    print(f"[SHEETS] {source_icon} {operation.upper()} '{sheet_name}'{size_str} | "
          f"Total: {_metrics['cache_hits']} hits / {_metrics['cache_misses']} misses")

def log_rate_limit_error(sheet_name):
    """Log a rate limit error"""
    _metrics['rate_limit_errors'] += 1
    print(f"[SHEETS] ⛔ RATE LIMIT for '{sheet_name}'")

def log_checkin(state, identifier, detail=None):
    """Count a finished check-in attempt by its terminal state"""
    if state == 'DONE':
        _metrics['checkins_succeeded'] += 1
        print(f"[CHECKIN] ✅ '{identifier}' checked in")
    elif state == 'NOT_FOUND':
        _metrics['checkins_not_found'] += 1
        print(f"[CHECKIN] 🔍 '{identifier}' not found")
    else:
        _metrics['checkins_failed'] += 1
        print(f"[CHECKIN] ❌ '{identifier}' failed: {detail}")

def log_lock_wait(lock_name, waited, acquired=True):
    """Record how long a caller waited on a document lock"""
    _metrics['lock_wait_total'] += waited
    if not acquired:
        _metrics['lock_timeouts'] += 1
        print(f"[LOCK] ⏳ Timed out on '{lock_name}' after {waited:.2f}s")
    elif waited >= 1:
        print(f"[LOCK] 🔒 Acquired '{lock_name}' after {waited:.2f}s")

def reset_metrics():
    """Reset all counters and drop recent call history"""
    for key, value in _metrics.items():
        if key == 'recent_calls':
            value.clear()
        elif isinstance(value, float):
            _metrics[key] = 0.0
        else:
            _metrics[key] = 0

def get_metrics(cache_details=None):
    """Get current API and check-in metrics"""
    now = time.time()
    one_min_ago = now - 60
    calls_last_min = [c for c in _metrics['recent_calls'] if c['time'] > one_min_ago]
    google_calls_last_min = [c for c in calls_last_min if c['source'] == 'google']
    bytes_last_min = sum(c.get('size_bytes') or 0 for c in google_calls_last_min)

    total_requests = _metrics['cache_hits'] + _metrics['cache_misses']
    hit_rate = (_metrics['cache_hits'] / total_requests * 100) if total_requests > 0 else 0

    return {
        'total_google_reads': _metrics['total_reads'],
        'total_writes': _metrics['total_writes'],
        'total_bytes': _metrics['total_bytes'],
        'total_bytes_formatted': _format_bytes(_metrics['total_bytes']),
        'cache_hits': _metrics['cache_hits'],
        'cache_misses': _metrics['cache_misses'],
        'cache_hit_rate': f"{hit_rate:.1f}%",
        'rate_limit_errors': _metrics['rate_limit_errors'],
        'checkins_succeeded': _metrics['checkins_succeeded'],
        'checkins_not_found': _metrics['checkins_not_found'],
        'checkins_failed': _metrics['checkins_failed'],
        'lock_timeouts': _metrics['lock_timeouts'],
        'lock_wait_seconds': round(_metrics['lock_wait_total'], 3),
        'google_calls_last_minute': len(google_calls_last_min),
        'bytes_last_minute_formatted': _format_bytes(bytes_last_min),
        'cache_details': cache_details or {},
        'recent_calls': list(calls_last_min)
    }
