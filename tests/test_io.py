import pytest

from vendordesk.io import read_financial_entries


def write_csv(tmp_path, content: str, name: str = "entries.csv"):
    path = tmp_path / name
    path.write_text(content.strip() + "\n", encoding="utf-8")
    return path


def test_read_financial_entries_normalizes_columns(tmp_path):
    path = write_csv(
        tmp_path,
        """
Type,Label,Category,Value,Date,Due_Date,Payment_Method,Observation,Ignored
Revenue,Consulting day,Services,1500.50,2026-10-02,2026-10-10,Pix,,x
expense, Office rent ,Rent,1200,2026/10/05,,Bank transfer,paid early,y
""",
    )

    df = read_financial_entries(path)

    assert list(df.columns) == [
        "type",
        "description",
        "category",
        "value",
        "date",
        "due_date",
        "payment_method",
        "observation",
    ]
    assert list(df["type"]) == ["revenue", "expense"]
    assert list(df["description"]) == ["Consulting day", "Office rent"]
    assert list(df["value"]) == [1500.5, 1200.0]
    assert list(df["date"]) == ["2026-10-02", "2026-10-05"]
    assert df.loc[0, "due_date"] == "2026-10-10"
    assert df.loc[1, "due_date"] is None
    assert df.loc[0, "observation"] is None
    assert df.loc[1, "observation"] == "paid early"


def test_optional_columns_may_be_absent(tmp_path):
    path = write_csv(
        tmp_path,
        """
type,description,category,value,date
expense,Hosting,Infrastructure,89.90,2026-10-01
""",
    )

    df = read_financial_entries(path)

    assert df.loc[0, "due_date"] is None
    assert df.loc[0, "payment_method"] is None
    assert df.loc[0, "value"] == pytest.approx(89.9)


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("type,description,value,date\nrevenue,Sale,10,2026-10-01", "Missing column"),
        ("type,description,category,value,date\nincome,Sale,Misc,10,2026-10-01", "'type'"),
        ("type,description,category,value,date\nrevenue,Sale,Misc,ten,2026-10-01", "'value'"),
        ("type,description,category,value,date\nrevenue,Sale,Misc,10,someday", "'date'"),
        ("type,description,category,value,date\nrevenue,Sale,Misc,10,", "'date'"),
        ("type,description,category,value,date\nrevenue,Sale,Misc,inf,2026-10-01", "Non-finite"),
    ],
)
def test_malformed_files_are_rejected(tmp_path, content, message):
    path = write_csv(tmp_path, content)

    with pytest.raises(ValueError, match=message):
        read_financial_entries(path)
