"""The HTML5 subset shipped with the compiler."""

from __future__ import annotations

from functools import lru_cache

from typedhtml.schema import SchemaRegistry

HTML5_FILENAME = "<html5>"

HTML5 = """
# Document structure
html { xmlns: Uri } with [head, body];
head with [title] MetadataContent;
body with FlowContent;

# Metadata
base { href: Uri, target: Target } in [MetadataContent];
link {
    as: String, crossorigin: CrossOrigin, href: Uri, hreflang: LanguageTag,
    media: String, rel: SpacedSet<LinkType>, sizes: String, title: String,
    type: Mime, integrity: Integrity
} in [MetadataContent];
meta {
    charset: CharacterEncoding, content: String, http_equiv: HTTPEquiv,
    name: Metadata
} in [MetadataContent];
style { type: Mime, media: String, nonce: Nonce, title: String } in [MetadataContent] with TextNode;
title in [MetadataContent] with TextNode;
script {
    async: Bool, crossorigin: CrossOrigin, defer: Bool, integrity: Integrity,
    nomodule: Bool, nonce: Nonce, src: Uri, text: String, type: String
} in [MetadataContent, FlowContent, PhrasingContent] with TextNode;
noscript in [MetadataContent, FlowContent, PhrasingContent] with FlowContent;

# Sections
address in [FlowContent] with FlowContent;
article in [FlowContent, SectioningContent] with FlowContent;
aside in [FlowContent, SectioningContent] with FlowContent;
footer in [FlowContent] with FlowContent;
header in [FlowContent] with FlowContent;
main in [FlowContent] with FlowContent;
nav in [FlowContent, SectioningContent] with FlowContent;
section in [FlowContent, SectioningContent] with FlowContent;
h1 in [FlowContent, HeadingContent] with PhrasingContent;
h2 in [FlowContent, HeadingContent] with PhrasingContent;
h3 in [FlowContent, HeadingContent] with PhrasingContent;
h4 in [FlowContent, HeadingContent] with PhrasingContent;
h5 in [FlowContent, HeadingContent] with PhrasingContent;
h6 in [FlowContent, HeadingContent] with PhrasingContent;

# Grouping
blockquote { cite: Uri } in [FlowContent] with FlowContent;
div in [FlowContent] with FlowContent;
dl in [FlowContent] with DescriptionListContent;
dt in [DescriptionListContent] with FlowContent;
dd in [DescriptionListContent] with FlowContent;
figure in [FlowContent] with FlowContent;
figcaption in [FlowContent] with FlowContent;
hr in [FlowContent];
li { value: isize } in [ListContent] with FlowContent;
ol { reversed: Bool, start: isize, type: OrderedListType } in [FlowContent] with li;
ul in [FlowContent] with li;
menu in [FlowContent] with li;
p in [FlowContent] with PhrasingContent;
pre in [FlowContent] with PhrasingContent;

# Text level
a {
    download: String, href: Uri, hreflang: LanguageTag, ping: SpacedList<Uri>,
    referrerpolicy: ReferrerPolicy, rel: SpacedSet<LinkType>, target: Target,
    type: Mime
} in [FlowContent, PhrasingContent, InteractiveContent] with FlowContent;
abbr in [FlowContent, PhrasingContent] with PhrasingContent;
b in [FlowContent, PhrasingContent] with PhrasingContent;
br in [FlowContent, PhrasingContent];
cite in [FlowContent, PhrasingContent] with PhrasingContent;
code in [FlowContent, PhrasingContent] with PhrasingContent;
data { value: String } in [FlowContent, PhrasingContent] with PhrasingContent;
em in [FlowContent, PhrasingContent] with PhrasingContent;
i in [FlowContent, PhrasingContent] with PhrasingContent;
kbd in [FlowContent, PhrasingContent] with PhrasingContent;
mark in [FlowContent, PhrasingContent] with PhrasingContent;
q { cite: Uri } in [FlowContent, PhrasingContent] with PhrasingContent;
s in [FlowContent, PhrasingContent] with PhrasingContent;
samp in [FlowContent, PhrasingContent] with PhrasingContent;
small in [FlowContent, PhrasingContent] with PhrasingContent;
span in [FlowContent, PhrasingContent] with PhrasingContent;
strong in [FlowContent, PhrasingContent] with PhrasingContent;
sub in [FlowContent, PhrasingContent] with PhrasingContent;
sup in [FlowContent, PhrasingContent] with PhrasingContent;
time { datetime: Datetime } in [FlowContent, PhrasingContent] with PhrasingContent;
u in [FlowContent, PhrasingContent] with PhrasingContent;
var in [FlowContent, PhrasingContent] with PhrasingContent;
wbr in [FlowContent, PhrasingContent];

# Embedded
area {
    alt: String, coords: String, download: String, href: Uri,
    hreflang: LanguageTag, ping: SpacedList<Uri>, rel: SpacedSet<LinkType>,
    shape: AreaShape, target: Target
} in [FlowContent, PhrasingContent, MapContent];
audio {
    autoplay: Bool, controls: Bool, crossorigin: CrossOrigin, loop: Bool,
    muted: Bool, preload: Preload, src: Uri
} in [FlowContent, PhrasingContent, EmbeddedContent] with MediaContent;
embed { height: usize, src: Uri, type: Mime, width: usize } in [FlowContent, PhrasingContent, EmbeddedContent];
iframe {
    allow: FeaturePolicy, allowfullscreen: Bool, height: usize, name: Id,
    referrerpolicy: ReferrerPolicy, sandbox: SpacedSet<Sandbox>, src: Uri,
    srcdoc: String, width: usize
} in [FlowContent, PhrasingContent, EmbeddedContent, InteractiveContent] with FlowContent;
img {
    alt: String, crossorigin: CrossOrigin, decoding: ImageDecoding,
    height: usize, ismap: Bool, sizes: SpacedList<String>, src: Uri,
    srcset: String, usemap: String, width: usize
} in [FlowContent, PhrasingContent, EmbeddedContent];
map { name: Id } in [FlowContent, PhrasingContent] with MapContent;
object { data: Uri, form: Id, height: usize, name: Id, type: Mime, width: usize } in [FlowContent, PhrasingContent, EmbeddedContent] with FlowContent;
param { name: String, value: String };
picture in [FlowContent, PhrasingContent, EmbeddedContent] with MediaContent;
source { media: String, sizes: String, src: Uri, srcset: String, type: Mime } in [MediaContent];
track {
    default: Bool, kind: VideoKind, label: String, src: Uri,
    srclang: LanguageTag
} in [MediaContent];
video {
    autoplay: Bool, controls: Bool, crossorigin: CrossOrigin, height: usize,
    loop: Bool, muted: Bool, preload: Preload, playsinline: Bool, poster: Uri,
    src: Uri, width: usize
} in [FlowContent, PhrasingContent, EmbeddedContent] with MediaContent;
canvas { height: usize, width: usize } in [FlowContent, PhrasingContent, EmbeddedContent] with FlowContent;

# Tables
table in [FlowContent] with TableContent;
caption in [TableContent] with FlowContent;
colgroup { span: usize } in [TableContent] with col;
col { span: usize };
tbody in [TableContent] with tr;
thead in [TableContent] with tr;
tfoot in [TableContent] with tr;
tr in [TableContent] with TableColumnContent;
td { colspan: usize, headers: SpacedSet<Id>, rowspan: usize } in [TableColumnContent] with FlowContent;
th {
    abbr: String, colspan: usize, headers: SpacedSet<Id>, rowspan: usize,
    scope: TableHeaderScope
} in [TableColumnContent] with FlowContent;

# Forms
button {
    autofocus: Bool, disabled: Bool, form: Id, formaction: Uri,
    formenctype: FormEncodingType, formmethod: FormMethod, formnovalidate: Bool,
    formtarget: Target, name: Id, type: ButtonType, value: String
} in [FlowContent, PhrasingContent, InteractiveContent, FormContent] with PhrasingContent;
datalist in [FlowContent, PhrasingContent] with option;
fieldset { disabled: Bool, form: Id, name: Id } in [FlowContent, FormContent] with FlowContent;
form {
    accept_charset: SpacedList<CharacterEncoding>, action: Uri,
    autocomplete: OnOff, enctype: FormEncodingType, method: FormMethod,
    name: Id, novalidate: Bool, target: Target
} in [FlowContent] with FlowContent;
input {
    autocomplete: String, autofocus: Bool, checked: Bool, disabled: Bool,
    form: Id, list: Id, max: String, maxlength: usize, min: String,
    minlength: usize, multiple: Bool, name: Id, pattern: String,
    placeholder: String, readonly: Bool, required: Bool, size: usize,
    spellcheck: Bool, src: Uri, step: String, type: InputType, value: String
} in [FlowContent, PhrasingContent, InteractiveContent, FormContent];
label { for: Id, form: Id } in [FlowContent, PhrasingContent, InteractiveContent, FormContent] with PhrasingContent;
legend in [FlowContent] with PhrasingContent;
meter {
    value: f64, min: f64, max: f64, low: f64, high: f64, optimum: f64,
    form: Id
} in [FlowContent, PhrasingContent, FormContent] with PhrasingContent;
optgroup { disabled: Bool, label: String } in [SelectContent] with option;
option { disabled: Bool, label: String, selected: Bool, value: String } in [SelectContent] with TextNode;
output { for: SpacedSet<Id>, form: Id, name: Id } in [FlowContent, PhrasingContent, FormContent] with PhrasingContent;
progress { max: f64, value: f64 } in [FlowContent, PhrasingContent] with PhrasingContent;
select {
    autocomplete: String, autofocus: Bool, disabled: Bool, form: Id,
    multiple: Bool, name: Id, required: Bool, size: usize
} in [FlowContent, PhrasingContent, InteractiveContent, FormContent] with SelectContent;
textarea {
    autocomplete: OnOff, autofocus: Bool, cols: usize, disabled: Bool,
    form: Id, maxlength: usize, minlength: usize, name: Id,
    placeholder: String, readonly: Bool, required: Bool, rows: usize,
    spellcheck: BoolOrDefault, wrap: Wrap
} in [FlowContent, PhrasingContent, InteractiveContent, FormContent] with TextNode;

# Interactive
details { open: Bool } in [FlowContent, SectioningContent, InteractiveContent] with [summary] FlowContent;
summary with PhrasingContent;
dialog { open: Bool } in [FlowContent] with FlowContent;
"""


@lru_cache(maxsize=None)
def default_registry() -> SchemaRegistry:
    """The shipped registry, built once and shared."""
    return SchemaRegistry.from_source(HTML5, HTML5_FILENAME)
