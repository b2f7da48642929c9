from .excel_writer import RESULT_COLUMNS, generate_file_name, result_rows, write_report_xlsx
