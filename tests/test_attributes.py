"""Tests for mailwright/transforms/attributes.py."""

from mailwright.transforms.attributes import (
    add_closing_slashes,
    quote_attributes,
    remove_empty_styles,
    rewrite_css,
    strip_empty_attributes,
)


class TestRemoveEmptyStyles:
    def test_removes_every_empty_style(self):
        html = '<div style=""><p style="">a</p><span style=\'\'>b</span></div>'
        assert remove_empty_styles(html) == "<div><p>a</p><span>b</span></div>"

    def test_removes_bare_style_attribute(self):
        assert remove_empty_styles("<td style>x</td>") == "<td>x</td>"

    def test_attribute_name_is_case_insensitive(self):
        assert remove_empty_styles('<td STYLE="">x</td>') == "<td>x</td>"

    def test_keeps_other_attributes_byte_identical(self):
        html = (
            "<table role='presentation' border=0 style=\"\" "
            'cellpadding="0"   data-x="a &amp; b">'
        )
        assert remove_empty_styles(html) == (
            "<table role='presentation' border=0 "
            'cellpadding="0"   data-x="a &amp; b">'
        )

    def test_keeps_non_empty_styles(self):
        html = '<p style="color:red" class="">x</p>'
        assert remove_empty_styles(html) == html

    def test_does_not_match_style_inside_values(self):
        html = '<p title="a style=&quot;&quot; b">x</p>'
        assert remove_empty_styles(html) == html

    def test_leaves_comments_untouched(self):
        html = '<!--[if mso]><table style=""><tr><td><![endif]--><div style=""></div>'
        assert remove_empty_styles(html) == (
            '<!--[if mso]><table style=""><tr><td><![endif]--><div></div>'
        )

    def test_leaves_script_and_style_bodies_untouched(self):
        html = (
            "<style>.a{color:red}</style>"
            '<script>var s = \'<i style="">\';</script>'
        )
        assert remove_empty_styles(html) == html

    def test_preserves_self_closing_tags(self):
        assert remove_empty_styles('<img src="a.png" style="" />') == '<img src="a.png" />'

    def test_is_idempotent(self):
        html = '<body style=""><div style="" id="x"><br style=""/></div></body>'
        once = remove_empty_styles(html)
        assert remove_empty_styles(once) == once
        assert 'style=""' not in once


class TestStripEmptyAttributes:
    def test_uses_predicate(self):
        html = '<div class="" id="" title="t" onclick="">x</div>'
        result = strip_empty_attributes(html, lambda name: name in {"class", "onclick"})
        assert result == '<div id="" title="t">x</div>'

    def test_attribute_glued_to_quoted_value(self):
        html = '<p hidden class=""title="t">x</p>'
        result = strip_empty_attributes(html, lambda name: name == "class")
        assert result == '<p hidden title="t">x</p>'


class TestAddClosingSlashes:
    def test_closes_void_elements(self):
        assert add_closing_slashes("<p>a<br>b</p>") == "<p>a<br/>b</p>"

    def test_quoted_value_needs_no_space(self):
        assert add_closing_slashes('<img src="a.png">') == '<img src="a.png"/>'

    def test_unquoted_value_gets_a_space(self):
        assert add_closing_slashes("<img src=a.png>") == "<img src=a.png />"

    def test_already_closed_is_unchanged(self):
        html = '<meta charset="utf-8" /><hr/>'
        assert add_closing_slashes(html) == html

    def test_ignores_non_void_elements(self):
        html = "<div><span>x</span></div>"
        assert add_closing_slashes(html) == html


class TestQuoteAttributes:
    def test_quotes_bare_values(self):
        html = '<a href="x" style=color:red;font-size:0>x</a><img alt=a src=https://x/a.png />'
        assert quote_attributes(html) == (
            '<a href="x" style="color:red;font-size:0">x</a>'
            '<img alt="a" src="https://x/a.png" />'
        )

    def test_escapes_bare_ampersands_in_values(self):
        html = '<a href="https://x.example/a?b=1&c=2&amp;d=3">x</a>'
        assert quote_attributes(html) == (
            '<a href="https://x.example/a?b=1&amp;c=2&amp;d=3">x</a>'
        )

    def test_keeps_single_quotes(self):
        assert quote_attributes("<p title='a \"b\"'>x</p>") == "<p title='a \"b\"'>x</p>"

    def test_leaves_quoted_tags_byte_identical(self):
        html = '<table role="presentation"  border="0" hidden>'
        assert quote_attributes(html) == html

    def test_rewrites_inside_conditional_comments(self):
        html = "<!--[if mso | IE]><table width=600><tr><td><![endif]--><!-- a=b -->"
        assert quote_attributes(html) == (
            '<!--[if mso | IE]><table width="600"><tr><td><![endif]--><!-- a=b -->'
        )

    def test_leaves_text_alone(self):
        html = "<p>Tom & Jerry</p>"
        assert quote_attributes(html) == html


class TestRewriteCss:
    @staticmethod
    def squeeze(css):
        return "".join(css.split())

    def test_rewrites_style_blocks_and_attributes(self):
        html = '<style type="text/css">\n  p { color: red; }\n</style><p style="color: red; margin: 0">x</p>'
        result = rewrite_css(html, self.squeeze)
        assert result == '<style type="text/css">p{color:red;}</style><p style="color:red;margin:0">x</p>'

    def test_leaves_conditional_styles_untouched(self):
        html = "<!--[if mso]><style> td { padding: 0; } </style><![endif]-->"
        assert rewrite_css(html, self.squeeze) == html

    def test_ignores_empty_style_attribute(self):
        html = '<p style="">x</p>'
        assert rewrite_css(html, self.squeeze) == html
