from app.core.categories import DEFAULT_CATEGORIES, LUCKY_FLAVOR_CATEGORIES, LUCKY_TOPICS
from app.core.errors import ModelGatewayError


def _scores(*pairs):
    return [{"name": n, "score": s} for n, s in pairs]


def _assert_json_with_cors(r):
    assert r.headers["content-type"].startswith("application/json")
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["access-control-allow-methods"] == "GET,POST,OPTIONS"
    assert r.headers["access-control-allow-headers"] == "Content-Type"


def test_sentiment_basic(client, gateway):
    gateway.responses = [{
        "explanation": "The tweet is strongly bullish about the earnings beat.",
        "categories": _scores(("Fear", 2), ("Bullishness", 9)),
    }]
    r = client.post("/sentiment", json={"tweet": "  NVDA crushed earnings  ", "categories": ["Bullishness", "Fear"]})
    assert r.status_code == 200
    data = r.json()
    assert data["model"] == "@cf/meta/llama-3.3-70b-instruct-fp8-fast"
    assert data["requestedCategories"] == ["Bullishness", "Fear"]
    assert data["count"] == 1
    result = data["results"][0]
    assert result["index"] == 0
    assert result["text"] == "NVDA crushed earnings"
    assert result["categories"] == [{"name": "Bullishness", "score": 9}, {"name": "Fear", "score": 2}]
    assert result["error"] is None
    assert data["summary"] == {"total": 1, "avgByCategory": {"Bullishness": 9.0, "Fear": 2.0}}
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["content-type"].startswith("application/json")


def test_sentiment_model_call_options(client, gateway):
    gateway.responses = [{"explanation": "x", "categories": []}]
    client.post("/sentiment", json={"text": "hello market"})
    call = gateway.calls[0]
    assert call["temperature"] == 0
    assert call["max_tokens"] == 256
    assert call["response_format"]["type"] == "json_schema"
    assert 'Tweet: "hello market"' in call["messages"][1]["content"]
    assert ", ".join(DEFAULT_CATEGORIES) in call["messages"][1]["content"]


def test_sentiment_no_valid_tweets(client, gateway):
    for body in ({}, {"tweets": ["", "   ", 5]}, {"tweet": 3}, {"text": ""}):
        r = client.post("/sentiment", json=body)
        assert r.status_code == 400
        assert "error" in r.json()
        _assert_json_with_cors(r)
    assert gateway.calls == []


def test_sentiment_invalid_json(client, gateway):
    r = client.post("/sentiment", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON"}
    _assert_json_with_cors(r)
    assert gateway.calls == []


def test_sentiment_first_shape_wins(client, gateway):
    gateway.responses = [{}, {}]
    r = client.post("/sentiment", json={"tweets": ["a", "b"], "tweet": "c", "text": "d"})
    assert [res["text"] for res in r.json()["results"]] == ["a", "b"]


def test_sentiment_categories_dedup_and_cap(client, gateway):
    gateway.responses = [{}]
    categories = ["A", "B", "a", "A", " B ", "C", "D", "E", "F", "G", "H", "I"]
    r = client.post("/sentiment", json={"tweet": "x", "categories": categories})
    data = r.json()
    assert data["requestedCategories"] == ["A", "B", "a", "C", "D", "E", "F", "G"]
    assert [c["name"] for c in data["results"][0]["categories"]] == data["requestedCategories"]


def test_sentiment_default_categories(client, gateway):
    gateway.responses = [{}]
    r = client.post("/sentiment", json={"tweet": "x", "categories": ["", 7]})
    assert r.json()["requestedCategories"] == list(DEFAULT_CATEGORIES)


def test_sentiment_reconciles_model_drift(client, gateway):
    gateway.responses = [{
        "explanation": 42,
        "categories": _scores(("fear", 3), ("Hype", 10.6), ("Extra", 5), ("Fear", -3), ("Hype", 1)),
    }]
    r = client.post("/sentiment", json={"tweet": "x", "categories": ["Fear", "Hype", "Uncertainty"]})
    result = r.json()["results"][0]
    assert result["explanation"] is None
    assert result["categories"] == [
        {"name": "Fear", "score": 0},
        {"name": "Hype", "score": 10},
        {"name": "Uncertainty", "score": None},
    ]
    assert r.json()["summary"]["avgByCategory"]["Uncertainty"] is None


def test_sentiment_partial_failure(client, gateway):
    gateway.responses = [
        {"explanation": "one", "categories": _scores(("Fear", 4))},
        {"explanation": "two", "categories": _scores(("Fear", 8))},
        ModelGatewayError("boom"),
    ]
    r = client.post("/sentiment", json={"tweets": ["a", "b", "c"], "categories": ["Fear"]})
    assert r.status_code == 200
    results = r.json()["results"]
    assert results[2]["error"] == "AI call failed"
    assert results[2]["categories"] == []
    assert results[2]["explanation"] is None
    assert results[0]["error"] is None and results[0]["categories"] == [{"name": "Fear", "score": 4}]
    assert results[1]["explanation"] == "two"
    assert r.json()["summary"] == {"total": 3, "avgByCategory": {"Fear": 6.0}}


def test_sentiment_all_calls_fail(client, gateway):
    gateway.responses = [ModelGatewayError("down")]
    r = client.post("/sentiment", json={"tweet": "x"})
    assert r.status_code == 200
    assert r.json()["summary"]["avgByCategory"] == {name: None for name in DEFAULT_CATEGORIES}


def test_lucky_basic(client, gateway):
    gateway.responses = ['  "Loading up on SPY calls again, what could go wrong"  ']
    r = client.post("/lucky", json={"seed": "  SPY calls  "})
    assert r.status_code == 200
    data = r.json()
    assert data["tweet"] == "Loading up on SPY calls again, what could go wrong"
    assert [f["name"] for f in data["flavorProfile"]] == list(LUCKY_FLAVOR_CATEGORIES)
    assert all(0 <= f["score"] <= 10 for f in data["flavorProfile"])
    call = gateway.calls[0]
    assert call["messages"][1]["content"] == "Generate one tweet about: SPY calls"
    assert call["temperature"] == 0.9
    assert call["max_tokens"] == 64
    assert call["response_format"] is None


def test_lucky_malformed_json_uses_random_topic(client, gateway):
    gateway.responses = ["Oil is doing oil things"]
    r = client.post("/lucky", content=b"{{{", headers={"Content-Type": "application/json"})
    assert r.status_code == 200
    assert len(r.json()["flavorProfile"]) == len(LUCKY_FLAVOR_CATEGORIES)
    topic = gateway.calls[0]["messages"][1]["content"].removeprefix("Generate one tweet about: ")
    assert topic in LUCKY_TOPICS


def test_lucky_without_body(client, gateway):
    gateway.responses = ["hi"]
    r = client.post("/lucky")
    assert r.status_code == 200
    assert r.json()["tweet"] == "hi"


def test_lucky_model_failure(client, gateway):
    gateway.responses = [ModelGatewayError("down")]
    r = client.post("/lucky", json={})
    assert r.status_code == 500
    assert r.json() == {"error": "AI call failed generating tweet"}
    _assert_json_with_cors(r)


def test_preflight(client):
    for path in ("/sentiment", "/lucky"):
        r = client.options(path)
        assert r.status_code == 204
        assert r.content == b""
        assert r.headers["access-control-allow-methods"] == "GET,POST,OPTIONS"
        assert r.headers["access-control-allow-headers"] == "Content-Type"


def test_unknown_routes(client):
    for method, path in (("GET", "/sentiment"), ("GET", "/health"), ("POST", "/other"), ("GET", "/docs")):
        r = client.request(method, path)
        assert r.status_code == 404
        assert r.text == "Not found"
        assert r.headers["access-control-allow-origin"] == "*"
