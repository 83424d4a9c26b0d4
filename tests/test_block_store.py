from app.models.html_block import HtmlBlock
from app.models.store import Store
from app.services.block_store import BlockListFilters, HtmlBlockRepository


def _add_block(db, code, html, *, store_id=None, sort_order=0, is_active=True, title=None, locale="en"):
    block = HtmlBlock(code=code, store_id=store_id, sort_order=sort_order, is_active=is_active)
    translation = block.translate_or_new(locale)
    translation.title = title or f"{code} #{sort_order}"
    translation.content = html
    db.add(block)
    db.flush()
    return block


def _stores(db) -> tuple[Store, Store]:
    main, outlet = Store(code="main"), Store(code="outlet")
    db.add_all([main, outlet])
    db.flush()
    return main, outlet


def test_find_active_blocks_applies_scope_and_flags(db_session):
    main, outlet = _stores(db_session)
    global_block = _add_block(db_session, "footer_left", "<p>G</p>", sort_order=2)
    main_block = _add_block(db_session, "footer_left", "<p>M</p>", store_id=main.id, sort_order=1)
    _add_block(db_session, "footer_left", "<p>O</p>", store_id=outlet.id)
    _add_block(db_session, "footer_left", "<p>off</p>", is_active=False)
    deleted = _add_block(db_session, "footer_left", "<p>gone</p>")
    deleted.soft_delete()
    _add_block(db_session, "header_top", "<p>H</p>")
    db_session.commit()

    repository = HtmlBlockRepository(db_session)

    assert [block.id for block in repository.find_active_blocks("footer_left", None)] == [global_block.id]
    main_ids = [block.id for block in repository.find_active_blocks("footer_left", main.id)]
    assert main_ids == [main_block.id, global_block.id]
    assert repository.find_active_blocks("footer_left", 999)[0].id == global_block.id


def test_find_active_blocks_returns_detached_snapshots(db_session):
    block = _add_block(db_session, "footer_left", "<p>A</p>")
    db_session.commit()

    snapshots = HtmlBlockRepository(db_session).find_active_blocks("footer_left", None)
    db_session.close()

    assert snapshots[0].id == block.id
    assert snapshots[0].translations[0].content == "<p>A</p>"


def test_equal_sort_order_breaks_ties_by_id(db_session):
    first = _add_block(db_session, "sidebar_top", "1", sort_order=3)
    second = _add_block(db_session, "sidebar_top", "2", sort_order=3)
    db_session.commit()

    ids = [block.id for block in HtmlBlockRepository(db_session).find_active_blocks("sidebar_top", None)]
    assert ids == sorted([first.id, second.id])


def test_list_blocks_filters(db_session):
    main, _ = _stores(db_session)
    _add_block(db_session, "footer_left", "x", title="Shipping info")
    _add_block(db_session, "footer_left", "y", store_id=main.id, is_active=False, title="Main store notice")
    _add_block(db_session, "header_top", "z", title="Banner")
    removed = _add_block(db_session, "header_top", "w", title="Old banner")
    removed.soft_delete()
    db_session.commit()

    repository = HtmlBlockRepository(db_session)

    assert repository.list_blocks(BlockListFilters()).total == 3
    assert repository.list_blocks(BlockListFilters(include_deleted=True)).total == 4
    assert repository.list_blocks(BlockListFilters(position="header_top")).total == 1
    assert repository.list_blocks(BlockListFilters(store_id="global")).total == 2
    assert repository.list_blocks(BlockListFilters(store_id=str(main.id))).total == 1
    assert repository.list_blocks(BlockListFilters(status="inactive")).total == 1
    assert repository.list_blocks(BlockListFilters(status="active")).total == 2

    by_title = repository.list_blocks(BlockListFilters(search="shipping"))
    assert [block.code for block in by_title.items] == ["footer_left"]
    assert repository.list_blocks(BlockListFilters(search="header")).total == 1


def test_list_blocks_paginates(db_session):
    for index in range(5):
        _add_block(db_session, "custom", str(index), sort_order=index)
    db_session.commit()

    page = HtmlBlockRepository(db_session).list_blocks(BlockListFilters(page=2, per_page=2))
    assert page.total == 5
    assert [block.sort_order for block in page.items] == [2, 3]


def test_api_list_bypasses_activity_filter(db_session):
    main, outlet = _stores(db_session)
    _add_block(db_session, "footer_left", "a", is_active=False)
    _add_block(db_session, "footer_left", "b", store_id=main.id)
    _add_block(db_session, "footer_left", "c", store_id=outlet.id)
    _add_block(db_session, "checkout_top", "d")
    db_session.commit()

    repository = HtmlBlockRepository(db_session)
    assert len(repository.api_list()) == 4
    assert [block.code for block in repository.api_list()] == ["checkout_top", "footer_left", "footer_left", "footer_left"]
    assert len(repository.api_list(position="footer_left", store_id=main.id)) == 2
    assert repository.store_exists(main.id)
    assert not repository.store_exists(12345)
