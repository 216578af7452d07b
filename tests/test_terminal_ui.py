from vending_machine import TerminalUI


def _run(context, *inputs):
    answers = iter(inputs)
    ui = TerminalUI(context, input_func=lambda prompt: next(answers))
    ui.run()
    return ui


def test_exit_immediately(context, capsys):
    _run(context, "0")
    out = capsys.readouterr().out
    assert "MAIN MENU" in out
    assert "Goodbye!" in out


def test_end_of_input_exits(context, capsys):
    def no_input(prompt):
        raise EOFError

    TerminalUI(context, input_func=no_input).run()
    assert "Goodbye!" in capsys.readouterr().out


def test_show_products_groups_by_category(context, capsys):
    _run(context, "1", "0")
    out = capsys.readouterr().out
    assert "Beverages:" in out
    assert "Snacks:" in out
    assert "1. Cola (330ml) - $2.50 (10 left)" in out
    assert "3. Chips (150g) - $3.00 (8 left)" in out


def test_buy_with_change(context, capsys):
    _run(context, "2", "2.00", "2", "1.00", "2", "0.50", "3", "1", "0")
    out = capsys.readouterr().out
    assert "You bought: Cola (330ml) - $2.50" in out
    assert "Your change:" in out
    assert "$1.00 x 1" in out
    assert context.ledger.current_balance() == 0


def test_rejected_coin(context, capsys):
    _run(context, "2", "0.25", "0")
    out = capsys.readouterr().out
    assert "Coin not accepted" in out
    assert context.ledger.current_balance() == 0


def test_buy_without_coins(context, capsys):
    _run(context, "3", "0")
    assert "Insert coins first!" in capsys.readouterr().out


def test_buy_invalid_number(context, capsys):
    _run(context, "2", "1.00", "3", "one", "0")
    assert "Invalid product number." in capsys.readouterr().out
    assert context.ledger.current_balance() == 100


def test_return_money(context, capsys):
    _run(context, "2", "2.00", "4", "0")
    out = capsys.readouterr().out
    assert "Returning your money" in out
    assert "$2.00 x 1" in out


def test_invalid_menu_choice(context, capsys):
    _run(context, "9", "0")
    assert "Invalid choice. Try again." in capsys.readouterr().out


def test_admin_wrong_password(context, capsys):
    _run(context, "5", "nope", "0")
    assert "[Admin] Wrong password" in capsys.readouterr().out


def test_admin_restock_and_statistics(context, capsys):
    _run(context, "5", "admin123", "1", "2", "5", "4", "0", "0")
    out = capsys.readouterr().out
    assert "Slot 2 restocked. New quantity: 20" in out
    assert "MACHINE STATISTICS" in out
    assert "Total items: 50" in out


def test_admin_add_beverage(context, capsys):
    _run(context, "5", "admin123", "2", "1", "Lemonade", "1.80", "6", "500", "0", "0")
    out = capsys.readouterr().out
    assert "Product added to slot 5" in out
    product = context.catalog.get_slot(5).get_product()
    assert product.name == "Lemonade"
    assert product.price == 180
    assert product.volume_ml == 500
    assert product.is_perishable


def test_admin_add_product_bad_price(context, capsys):
    _run(context, "5", "admin123", "2", "2", "Nuts", "cheap", "0", "0")
    assert "Invalid price." in capsys.readouterr().out
    assert len(context.catalog) == 4


def test_admin_add_product_zero_or_negative_price(context, capsys):
    _run(context, "5", "admin123", "2", "2", "Nuts", "0", "2", "2", "Nuts", "-1.00", "0", "0")
    out = capsys.readouterr().out
    assert out.count("Invalid price.") == 2
    assert "Goodbye!" in out
    assert len(context.catalog) == 4


def test_end_of_input_inside_admin_mode_exits(context, capsys):
    answers = iter(["5", "admin123"])

    def scripted(prompt):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    TerminalUI(context, input_func=scripted).run()
    assert "Goodbye!" in capsys.readouterr().out


def test_end_of_input_at_coin_prompt_exits(context, capsys):
    answers = iter(["2"])

    def scripted(prompt):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    TerminalUI(context, input_func=scripted).run()
    assert "Goodbye!" in capsys.readouterr().out
    assert context.ledger.current_balance() == 0


def test_admin_collect_earnings(context, capsys):
    _run(context, "5", "admin123", "3", "0", "0")
    out = capsys.readouterr().out
    assert "$10.00 x 2 = $20.00" in out
    assert "Total: $100.00" in out


def test_admin_refill_coins(context, capsys):
    _run(context, "5", "admin123", "5", "0.10", "25", "0", "0")
    assert context.ledger.count(10) == 75


def test_admin_session_ends_on_leave(context, capsys):
    ui = _run(context, "5", "admin123", "0", "0")
    assert "ADMIN MODE" in capsys.readouterr().out
    assert ui.get_coordinator().current_balance() == 0
