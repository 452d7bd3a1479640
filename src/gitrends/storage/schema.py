"""Arrow schemas of the two indexed tables."""

import pyarrow as pa

GIT_LOG_FILE = "git_log.parquet"
GIT_FILE_ENTRIES_FILE = "git_file_entries.parquet"

GIT_LOG_SCHEMA = pa.schema(
    [
        pa.field("revision", pa.string(), nullable=False),
        pa.field("date", pa.int64(), nullable=False),
        pa.field("author", pa.string(), nullable=False),
        pa.field("commit_message", pa.string(), nullable=False),
    ]
)

GIT_FILE_ENTRIES_SCHEMA = pa.schema(
    [
        pa.field("revision", pa.string(), nullable=False),
        pa.field("file_name", pa.string(), nullable=False),
        pa.field("date", pa.int64(), nullable=False),
        pa.field("exists_at_head", pa.bool_(), nullable=False),
        pa.field("num_code_lines", pa.uint64(), nullable=False),
        pa.field("num_comment_lines", pa.uint64(), nullable=False),
        pa.field("num_blank_lines", pa.uint64(), nullable=False),
        pa.field("total_indent_levels", pa.uint64(), nullable=False),
        # NaN for files without code lines
        pa.field("avg_indent_levels", pa.float64(), nullable=False),
        pa.field("std_indent_level", pa.float64(), nullable=False),
        pa.field("num_added_lines", pa.uint64(), nullable=False),
        pa.field("num_removed_lines", pa.uint64(), nullable=False),
    ]
)
