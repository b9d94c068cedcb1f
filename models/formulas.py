"""
Formula backup and restore.

A snapshot is a list of {"sheetName", "formulas": [{"row", "col", "formula"}]}
stored as JSON in the settings store, so formulas wiped by manual edits
can be put back at their original coordinates.
"""
import json

from gspread.exceptions import WorksheetNotFound

from models import fields
from models.metrics import log_api_call
from models.utils import cell_label


def capture_formulas(worksheet):
    """Every non-empty formula cell of a worksheet as row/col/formula dicts"""
    grid = worksheet.get_all_values(value_render_option='FORMULA')
    log_api_call('read', worksheet.title, source='google')
    formulas = []
    for i, row in enumerate(grid):
        for j, value in enumerate(row):
            if isinstance(value, str) and value.startswith('='):
                formulas.append({'row': i + 1, 'col': j + 1, 'formula': value})
    return formulas


def backup_formulas(spreadsheet, config):
    """Snapshot formulas from every worksheet into the settings store"""
    snapshot = []
    cells = []
    for worksheet in spreadsheet.worksheets():
        formulas = capture_formulas(worksheet)
        snapshot.append({'sheetName': worksheet.title, 'formulas': formulas})
        cells.extend(cell_label(worksheet.title, f['row'], f['col']) for f in formulas)

    config.set(fields.FORMULA_BACKUP_KEY, json.dumps(snapshot))
    print(f"[FORMULAS] 💾 Backed up {len(cells)} formula cells")
    return {'success': True, 'message': f'backed up {len(cells)} formula cells', 'cells': cells}


def restore_formulas(spreadsheet, config):
    """Re-apply every formula in the stored snapshot. Missing sheets are skipped."""
    stored = config.get(fields.FORMULA_BACKUP_KEY)
    if not stored:
        return {'success': False, 'message': 'no backup found', 'cells': []}

    cells = []
    for item in json.loads(stored):
        try:
            worksheet = spreadsheet.worksheet(item['sheetName'])
        except WorksheetNotFound:
            print(f"[FORMULAS] ⚠️ Sheet '{item['sheetName']}' no longer exists - skipped")
            continue
        for f in item['formulas']:
            # update_cell writes USER_ENTERED, so the text is parsed as a formula
            worksheet.update_cell(f['row'], f['col'], f['formula'])
            cells.append(cell_label(worksheet.title, f['row'], f['col']))
        log_api_call('write', worksheet.title, source='google')

    print(f"[FORMULAS] ♻️ Restored {len(cells)} formula cells")
    return {'success': True, 'message': f'restored {len(cells)} formula cells', 'cells': cells}
