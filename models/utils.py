def find_column_index(headers, header_name):
    """Find the 1-based index of a column by its header name"""
    try:
        return list(headers).index(header_name) + 1
    except ValueError:
        return None

def row_to_record(headers, row):
    """Map a row of cell values onto headers, padding short rows with ''"""
    values = list(row) + [''] * (len(headers) - len(row))
    return dict(zip(headers, values))

def format_message(template, data):
    """Replace every {{key}} in template with the matching value from data.

    Placeholders with no matching key are left as they are.
    """
    message = template
    for key, value in data.items():
        message = message.replace('{{%s}}' % key, str(value))
    return message

def column_letter(col):
    """Convert a 1-based column number to its letter (1 -> A, 27 -> AA)"""
    result = ''
    while col > 0:
        col, remainder = divmod(col - 1, 26)
        result = chr(65 + remainder) + result
    return result

def cell_label(sheet_name, row, col):
    """A1-style label with sheet prefix, e.g. Directory!B3"""
    return f"{sheet_name}!{column_letter(col)}{row}"
