import os

from flask import Flask

from models.checkin import CheckinService
from models.lock import DEFAULT_LOCK_TIMEOUT, get_document_lock
from models.sheets import (
    SheetCheckinLog,
    SheetConfigStore,
    SheetDirectory,
    SPREADSHEET_NAME,
    _get_spreadsheet_instance,
    get_cache_details,
    invalidate_cache,
)
from models.templates import MessageTemplates
from routes.admin import register_admin_routes
from routes.checkin import register_checkin_routes

LOCK_TIMEOUT_SECONDS = float(os.environ.get('LOCK_TIMEOUT_SECONDS', DEFAULT_LOCK_TIMEOUT))

app = Flask(__name__)

# Google Sheets backed stores; the spreadsheet is opened on first use
config = SheetConfigStore()
templates = MessageTemplates(config)
service = CheckinService(
    directory=SheetDirectory(),
    log=SheetCheckinLog(),
    templates=templates,
    lock=get_document_lock(SPREADSHEET_NAME),
    lock_timeout=LOCK_TIMEOUT_SECONDS,
)


def clear_caches():
    invalidate_cache()
    templates.forget()


# Register route modules
register_checkin_routes(app, service, templates, config)
register_admin_routes(app, config, _get_spreadsheet_instance, get_cache_details, clear_caches)

if __name__ == '__main__':
    app.run(debug=True, port=5001)
