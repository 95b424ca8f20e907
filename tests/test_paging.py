from opsdesk.erp.paging import PageInfo, RowCap, page_bounds, slice_page


def test_page_bounds_offsets():
    assert page_bounds(1, 50).offset == 0
    assert page_bounds(3, 50).offset == 100
    assert page_bounds(3, 50).limit == 50


def test_page_bounds_clamps_bad_input():
    bounds = page_bounds(0, 0)
    assert (bounds.page, bounds.page_size, bounds.offset, bounds.limit) == (1, 1, 0, 1)
    assert page_bounds("x", None).page == 1
    assert page_bounds("2", "25").offset == 25


def test_paging_clause_per_dialect():
    bounds = page_bounds(2, 10)
    assert bounds.params() == {"page_offset": 10, "page_limit": 10}
    assert bounds.paging_clause("oracle") == "OFFSET :page_offset ROWS FETCH NEXT :page_limit ROWS ONLY"
    assert bounds.paging_clause("mssql").startswith("OFFSET")
    assert bounds.paging_clause("sqlite") == "LIMIT :page_limit OFFSET :page_offset"


def test_row_cap_uses_rownum_on_oracle_only():
    cap = RowCap(100)
    assert cap.params() == {"row_cap": 100}
    assert cap.where_predicate("oracle") == "ROWNUM <= :row_cap"
    assert cap.tail_clause("oracle") == ""
    assert cap.where_predicate("sqlite") is None
    assert cap.tail_clause("sqlite") == "LIMIT :row_cap"


def test_page_info_navigation():
    info = PageInfo(page=2, page_size=50, total_count=120)
    assert info.total_pages == 3
    assert info.has_next_page and info.has_prev_page
    assert PageInfo(1, 50, 0).as_dict() == {
        "page": 1,
        "page_size": 50,
        "total_count": 0,
        "total_pages": 0,
        "has_next_page": False,
        "has_prev_page": False,
    }


def test_slice_page_matches_bounds():
    items = list(range(7))
    assert slice_page(items, page_bounds(2, 3)) == [3, 4, 5]
    assert slice_page(items, page_bounds(4, 3)) == []
