from flask import jsonify, request

from models import fields


def _payload():
    """JSON object body if present, otherwise form fields"""
    data = request.get_json(silent=True)
    if isinstance(data, dict) and data:
        return data
    return request.form.to_dict()


def register_checkin_routes(app, service, templates, config):
    """Register check-in and message template routes"""

    @app.route('/api/checkin', methods=['POST'])
    def checkin():
        identifier = str(_payload().get('id') or '').strip()
        result = service.check_in(identifier)
        return jsonify(result.to_dict())

    @app.route('/api/template', methods=['GET'])
    def get_template():
        try:
            return jsonify({'success': True, 'template': templates.get()})
        except Exception as e:
            return jsonify({'success': False, 'message': str(e)}), 500

    @app.route('/api/template', methods=['POST'])
    def update_template():
        template = _payload().get('template')
        if template is None:
            return jsonify({'success': False, 'message': 'template is required'}), 400
        if not isinstance(template, str):
            return jsonify({'success': False, 'message': 'template must be a string'}), 400
        return jsonify(templates.update(template))

    @app.route('/api/base-url', methods=['GET'])
    def get_base_url():
        try:
            return jsonify({'success': True, 'url': config.get(fields.BASE_URL_KEY) or ''})
        except Exception as e:
            return jsonify({'success': False, 'message': str(e)}), 500

    @app.route('/api/base-url', methods=['POST'])
    def set_base_url():
        url = str(_payload().get('url') or '').strip()
        try:
            config.set(fields.BASE_URL_KEY, url)
            return jsonify({'success': True, 'message': 'base url updated'})
        except Exception as e:
            return jsonify({'success': False, 'message': str(e)}), 500
