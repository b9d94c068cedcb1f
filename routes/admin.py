from flask import jsonify

from models.formulas import backup_formulas, restore_formulas
from models.metrics import get_metrics


def register_admin_routes(app, config, spreadsheet_getter, cache_details, invalidate_cache):
    """Register formula backup/restore, metrics and cache routes"""

    @app.route('/api/formulas/backup', methods=['POST'])
    def formulas_backup():
        try:
            return jsonify(backup_formulas(spreadsheet_getter(), config))
        except Exception as e:
            return jsonify({'success': False, 'message': f'backup failed: {e}'}), 500

    @app.route('/api/formulas/restore', methods=['POST'])
    def formulas_restore():
        try:
            return jsonify(restore_formulas(spreadsheet_getter(), config))
        except Exception as e:
            return jsonify({'success': False, 'message': f'restore failed: {e}'}), 500

    @app.route('/api/metrics')
    def metrics():
        return jsonify(get_metrics(cache_details=cache_details()))

    @app.route('/api/cache/clear', methods=['POST'])
    def cache_clear():
        invalidate_cache()
        return jsonify({'success': True, 'message': 'Cache cleared'})
