"""End-to-end tests: markup in, HTML out."""

from __future__ import annotations

from typedhtml import compile_markup, render


class TestRoundTrip:
    def test_empty_div(self, render_html):
        assert render_html("<div></div>") == "<div></div>"

    def test_void_element(self, render_html):
        assert render_html("<br/>") == "<br/>"

    def test_unconstrained_element_self_closes(self, render_html):
        # `param` declares no children at all
        assert render_html("<param></param>") == "<param/>"

    def test_self_closing_container_without_children(self, render_html):
        assert render_html("<p/>") == "<p></p>"

    def test_text(self, render_html):
        assert render_html('<p>"Hello Joe!"</p>') == "<p>Hello Joe!</p>"

    def test_text_root(self, render_html):
        assert render_html('"a < b"') == "a &lt; b"

    def test_nested(self, render_html):
        source = '<ul><li>"one"</li><li>"two"</li></ul>'
        assert render_html(source) == "<ul><li>one</li><li>two</li></ul>"

    def test_dashed_element_name(self, render_html, registry):
        custom = registry.merged("card_title in [FlowContent]; my_card in [FlowContent] with [card_title] FlowContent;")
        source = '<div><my-card><card-title/>"x"</my-card></div>'
        assert render_html(source, registry=custom) == "<div><my-card><card-title/>x</my-card></div>"
        el = compile_markup(source, registry=custom).build()
        (card,) = el.children
        assert card.name() == "my-card"
        assert card.required_child_names() == ("card-title",)

    def test_required_children(self, render_html):
        source = '<html><head><title>"T"</title></head><body><p>"x"</p></body></html>'
        assert render_html(source) == source.replace('"T"', "T").replace('"x"', "x")

    def test_render_is_repeatable(self, render_html):
        source = '<div id="a" class="b c"><p>"x"</p></div>'
        assert render_html(source) == render_html(source)

    def test_top_level_render(self):
        assert render('<em>"hi"</em>') == "<em>hi</em>"


class TestAttributes:
    def test_sorted_by_name(self, render_html):
        assert render_html('<a id="x" href="/y"></a>') == '<a href="/y" id="x"></a>'

    def test_dashed_name(self, render_html):
        source = '<meta http-equiv="refresh" content="5"/>'
        assert render_html(source) == '<meta content="5" http-equiv="refresh"/>'

    def test_data_attributes_follow_typed(self, render_html):
        source = '<div data-id="1234" id="x">"Boo!"</div>'
        assert render_html(source) == '<div id="x" data-id="1234">Boo!</div>'

    def test_data_attribute(self, render_html):
        assert render_html('<div data-id="1234">"Boo!"</div>') == '<div data-id="1234">Boo!</div>'

    def test_data_attributes_in_source_order(self, render_html):
        source = '<div data-z="1" data-a="2"></div>'
        assert render_html(source) == '<div data-z="1" data-a="2"></div>'

    def test_bool_true_is_bare(self, render_html):
        assert render_html('<input disabled="true"/>') == "<input disabled/>"

    def test_bool_false_is_omitted(self, render_html):
        assert render_html('<input disabled="false"/>') == "<input/>"

    def test_number_literal(self, render_html):
        assert render_html("<td colspan=2></td>") == '<td colspan="2"></td>'

    def test_class_set_is_sorted_and_deduplicated(self, render_html):
        assert render_html('<div class="foo bar foo"></div>') == '<div class="bar foo"></div>'

    def test_attribute_escaping(self, render_html):
        source = '<a title="\\"Tom\\" & \'Jerry\'"></a>'
        assert render_html(source) == '<a title="&quot;Tom&quot; &amp; &#x27;Jerry&#x27;"></a>'

    def test_text_escaping(self, render_html):
        assert render_html('<p>"<b> & </b>"</p>') == "<p>&lt;b&gt; &amp; &lt;/b&gt;</p>"


class TestExpressions:
    def test_name(self, render_html):
        assert render_html("<a href=url></a>", {"url": "/x"}) == '<a href="/x"></a>'

    def test_path_through_mapping(self, render_html):
        scope = {"page": {"url": "/p"}}
        assert render_html("<a href=page.url></a>", scope) == '<a href="/p"></a>'

    def test_enum_path(self, render_html):
        html = render_html('<link rel=[LinkType::StyleSheet] href="/s.css"/>')
        assert html == '<link href="/s.css" rel="stylesheet"/>'

    def test_block_attribute(self, render_html):
        assert render_html("<td colspan={ n + 1 }></td>", {"n": 2}) == '<td colspan="3"></td>'

    def test_call(self, render_html):
        scope = {"url_for": lambda name: f"/{name}"}
        assert render_html('<a href=url_for("home")></a>', scope) == '<a href="/home"></a>'

    def test_bool_expression(self, render_html):
        assert render_html("<input checked=on/>", {"on": True}) == "<input checked/>"
        assert render_html("<input checked=on/>", {"on": False}) == "<input/>"

    def test_data_expression(self, render_html):
        assert render_html("<div data-n=n></div>", {"n": 7}) == '<div data-n="7"></div>'


class TestBlocks:
    def test_splice_list(self, render_html):
        li = compile_markup("<li>{ label }</li>")
        scope = {"xs": ["a", "b"], "item": lambda x: li.build({"label": x})}
        source = "<ul>{ [item(x) for x in xs] }</ul>"
        assert render_html(source, scope) == "<ul><li>a</li><li>b</li></ul>"

    def test_splice_string_is_escaped(self, render_html):
        assert render_html("<p>{ s }</p>", {"s": "<b>"}) == "<p>&lt;b&gt;</p>"

    def test_splice_unsafe_text(self, render_html):
        assert render_html("<p>{ unsafe_text(s) }</p>", {"s": "<b>x</b>"}) == "<p><b>x</b></p>"

    def test_splice_empty(self, render_html):
        assert render_html("<div>{ [] }</div>") == "<div></div>"


class TestOutputTypes:
    def test_string_handler(self, render_html):
        source = '<button onclick="go()">"Go"</button> : String'
        assert render_html(source) == '<button onclick="go()">Go</button>'

    def test_events_after_data(self, render_html):
        source = '<button onclick="a()" data-x="1" type="button"></button> : String'
        assert render_html(source) == '<button type="button" data-x="1" onclick="a()"></button>'

    def test_events_in_fixed_order(self, render_html):
        source = '<input onkeyup="b()" onblur="a()"/> : String'
        assert render_html(source) == '<input onblur="a()" onkeyup="b()"/>'

    def test_dom_handlers_are_not_printed(self, render_html):
        source = "<button onclick=handler></button>"
        html = render_html(source, {"handler": lambda event: None}, output="Dom")
        assert html == "<button></button>"

    def test_api_output_type(self, render_html):
        source = '<button onclick="x()"></button>'
        assert render_html(source, output="String") == '<button onclick="x()"></button>'
