"""
Tests for sql2struct.go_generator (Go rendering and file output).
"""
import re

import pytest

from sql2struct import (
    GoGenerator,
    OutputWriteError,
    build_document,
    generate_go_file,
    generate_go_source,
    output_file_name,
    parse_sql,
)
from sql2struct.go_generator import DEFAULT_DATETIME_IMPORT, WRAPPER_VALUE_FIELDS


def line(source: str, pattern: str) -> bool:
    """True if some whole line of source matches pattern."""
    return re.search(pattern, source, re.MULTILINE) is not None


def single_column_source(definition: str, entity: str = "Item") -> str:
    ctx = parse_sql(
        f"CREATE TABLE db.item (\n  {definition}\n)",
        struct_name="ItemPO",
        second_struct_name=entity,
    )
    return generate_go_source(ctx)


@pytest.fixture
def source(context):
    return generate_go_source(context)


# ============== PO struct ==============


class TestPoBlock:
    """Tests for the PO section."""

    def test_header(self, source):
        assert source.startswith("package po\n\nimport (\n")
        assert '\t"database/sql"\n' in source
        assert f'\t"{DEFAULT_DATETIME_IMPORT}"\n' in source

    def test_custom_datetime_import(self, context):
        text = generate_go_source(context, datetime_import="example.com/lib/datetime")
        assert '\t"example.com/lib/datetime"\n' in text
        assert DEFAULT_DATETIME_IMPORT not in text

    def test_no_imports_when_unused(self):
        text = single_column_source("`a` INT NOT NULL COMMENT 'a'")
        assert "import (" not in text

    def test_struct_declaration(self, source):
        assert "// UserInfoPO PO struct\ntype UserInfoPO struct {\n" in source

    def test_field_lines(self, source):
        assert line(source, r'^\tId\s+int64\s+`db:"fid"` // primary key$')
        assert line(source, r'^\tUserName\s+string\s+`db:"fuser_name" validate:"max=64"` // user name$')
        assert line(source, r'^\tNickname\s+sql\.NullString\s+`db:"fnickname" validate:"max=32"` // nickname$')
        assert line(source, r'^\tIdCard\s+string\s+`db:"fid_card" validate:"omitempty"` // id card$')
        assert line(source, r'^\tCreatedAt\s+datetime\.NullDateTime\s+`db:"fcreated_at"` // created time$')

    def test_field_padding(self, source):
        expected = "\t" + "Id".ljust(30) + " " + "int64".ljust(20) + ' `db:"fid"` // primary key'
        assert expected in source.splitlines()

    def test_multi_line_comment(self):
        """A comment spanning lines stays on its field's line in both structs."""
        source = single_column_source("`fnote` VARCHAR(16) NOT NULL COMMENT 'it''s\n  second line'")
        assert line(source, r'^\tNote\s+string\s+`db:"fnote" validate:"max=16"` // it\'s second line$')
        assert line(source, r"^\tnote\s+string\s+// it's second line$")
        assert not any(l.strip() == "second line" for l in source.splitlines())


# ============== Entity side ==============


class TestEntityBlock:
    """Tests for the entity section."""

    def test_package_and_directive(self, source):
        assert "}\n\n\npackage entity\n\n" in source
        assert "//go:generate entitytool -source=$GOFILE -entity=UserInfo\n" in source

    def test_struct(self, source):
        assert "// UserInfo entity struct\ntype UserInfo struct {\n" in source
        assert line(source, r'^\tnickname\s+string\s+// nickname$')
        assert line(source, r'^\tcreatedAt\s+time\.Time\s+// created time$')
        assert line(source, r'^\tupdatedAt\s+time\.Time\s+// updated time$')
        assert line(source, r'^\tage\s+int32\s+// age$')

    def test_validate_stub(self, source):
        assert "func (e *UserInfo) Validate() error {\n\treturn nil\n}\n" in source

    def test_po_only(self, user_info_ddl):
        text = generate_go_source(parse_sql(user_info_ddl, struct_name="UserInfoPO"))
        assert "package entity" not in text
        assert "Validate()" not in text
        assert "TimeToNullDateTime" not in text
        assert text.endswith("}\n")


# ============== Conversions ==============


class TestToEntity:
    """Tests for the PO -> entity function."""

    def test_signature(self, source):
        assert (
            "// ToUserInfoEntity po to entity\n"
            "func ToUserInfoEntity(p *po.UserInfoPO) (*entity.UserInfo, error) {\n"
            "\treturn entity.NewUserInfoBuilder().\n"
        ) in source
        assert "\t\tBuild()\n}\n" in source

    def test_accessors(self, source):
        assert "\t\tWithId(p.Id).\n" in source
        assert "\t\tWithNickname(p.Nickname.String).\n" in source
        assert "\t\tWithAge(p.Age.Int32).\n" in source
        assert "\t\tWithBalance(p.Balance).\n" in source
        assert "\t\tWithCreatedAt(p.CreatedAt.Time.Time()).\n" in source
        assert "\t\tWithUpdatedAt(p.UpdatedAt.Time()).\n" in source


class TestToPo:
    """Tests for the entity -> PO function."""

    def test_signature(self, source):
        assert (
            "// ToUserInfoPO entity to po\n"
            "func ToUserInfoPO(e *entity.UserInfo) (*po.UserInfoPO, error) {\n"
            "\treturn &po.UserInfoPO{\n"
        ) in source
        assert "\t}, nil\n}\n" in source

    def test_assignments(self, source):
        assert "\t\tId             : e.Id(),\n" in source
        assert "\t\tNickname       : sql.NullString{String: e.Nickname(), Valid: true},\n" in source
        assert "\t\tAge            : sql.NullInt32{Int32: e.Age(), Valid: true},\n" in source
        assert "\t\tCreatedAt      : TimeToNullDateTime(e.CreatedAt()),\n" in source
        assert "\t\tUpdatedAt      : datetime.NewDateTime(e.UpdatedAt()),\n" in source


class TestRoundTrip:
    """The two conversions read and write the same wrapper field."""

    @pytest.mark.parametrize("sql_type,wrapper", [
        ("INT", "sql.NullInt32"),
        ("BIGINT", "sql.NullInt64"),
        ("VARCHAR(16)", "sql.NullString"),
        ("DOUBLE", "sql.NullFloat64"),
        ("FLOAT", "sql.NullFloat32"),
    ])
    def test_wrapper_fields_match(self, sql_type, wrapper):
        text = single_column_source(f"`fvalue` {sql_type} DEFAULT NULL COMMENT 'v'")
        read = re.search(r"WithValue\(p\.Value\.(\w+)\)", text).group(1)
        written = re.search(
            re.escape(wrapper) + r"\{(\w+): e\.Value\(\), Valid: true\}", text
        ).group(1)
        assert read == written == WRAPPER_VALUE_FIELDS[wrapper]

    def test_null_datetime_helper(self):
        """Zero time maps to an invalid wrapper, anything else to a valid one."""
        text = single_column_source("`fat` DATETIME NULL COMMENT 'at'")
        assert "WithAt(p.At.Time.Time())." in text
        assert "TimeToNullDateTime(e.At())" in text
        assert (
            "func TimeToNullDateTime(t time.Time) datetime.NullDateTime {\n"
            "\tif !t.IsZero() {\n"
            "\t\treturn datetime.NullDateTime{Time: datetime.NewDateTime(t), Valid: true}\n"
            "\t}\n"
            "\treturn datetime.NullDateTime{Valid: false}\n"
            "}\n"
        ) in text

    def test_helper_only_when_needed(self):
        text = single_column_source("`fat` DATETIME NOT NULL COMMENT 'at'")
        assert "TimeToNullDateTime" not in text


class TestUnmappedOutput:
    """Unmapped types surface as an empty type in the output."""

    def test_empty_type(self):
        text = single_column_source("`fstatus` ENUM('on','off') NOT NULL COMMENT 'status'")
        assert line(text, r'^\tStatus\s+`db:"fstatus"` // status$')
        assert line(text, r'^\tstatus\s+// status$')
        assert "\t\tWithStatus(p.Status).\n" in text
        assert "\t\tStatus         : e.Status(),\n" in text


# ============== Files ==============


class TestOutputFile:
    """Tests for output naming and writing."""

    def test_file_name(self, context):
        assert output_file_name(context) == "user_info_template.go"

    def test_file_name_without_entity(self, user_info_ddl):
        assert output_file_name(parse_sql(user_info_ddl)) == "_template.go"

    def test_write(self, context, tmp_path):
        path = generate_go_file(context, tmp_path)
        assert path == tmp_path / "user_info_template.go"
        assert path.read_text(encoding="utf-8") == generate_go_source(context)

    def test_write_failure(self, context, tmp_path):
        with pytest.raises(OutputWriteError) as exc_info:
            generate_go_file(context, tmp_path / "missing")
        assert isinstance(exc_info.value.__cause__, OSError)
        assert not (tmp_path / "missing").exists()

    def test_generator_class(self, context):
        text = GoGenerator(datetime_import="x/datetime").generate(build_document(context))
        assert '\t"x/datetime"\n' in text
