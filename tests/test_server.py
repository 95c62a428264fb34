def test_index_reports_builtin_grammar(client):
    response = client.get('/')
    assert response.status_code == 200
    data = response.get_json()
    assert data["matchesExpected"] is True
    assert data["grammar"][0] == "E → E << T"
    assert data["firstSets"]["FIRST(E)"] == "{ (, id }"
    assert data["followSets"]["FOLLOW(F)"] == "{ $, ), +, -, <<, >> }"


def test_first_follow_for_posted_grammar(client):
    response = client.post('/first-follow', json={
        "non_terminals": ["S", "A"],
        "terminals": ["a", "b"],
        "productions": [
            {"lhs": "S", "rhs": ["A", "b"]},
            {"lhs": "A", "rhs": ["a", "A"]},
            {"lhs": "A", "rhs": []},
        ],
        "start": "S",
    })
    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["firstSets"] == {"FIRST(A)": "{ a }", "FIRST(S)": "{ a, b }"}
    assert data["followSets"] == {"FOLLOW(A)": "{ b }", "FOLLOW(S)": "{ $ }"}


def test_first_follow_rejects_bad_grammar(client):
    response = client.post('/first-follow', json={
        "non_terminals": ["S"], "terminals": [], "productions": [{"lhs": "S", "rhs": ["x"]}], "start": "S",
    })
    assert response.status_code == 400
    assert "Undeclared symbol 'x'" in response.get_json()["error"]


def test_first_follow_requires_body(client):
    assert client.post('/first-follow').status_code == 400


def test_parser_success(client):
    response = client.post('/parser', json={"input": "a + f", "declarations": {"f": "float"}})
    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["syntax_tree"].startswith("BinaryOp(+) [type: float]")
    assert data["treeDot"].startswith("digraph")
    assert data["errors"] == ""


def test_parser_reports_syntax_errors(client):
    data = client.post('/parser', json={"input": "(a"}).get_json()
    assert data["success"] is False
    assert data["syntax_tree"] is None
    assert data["symbol_table"] is None
    assert data["errors"].startswith("Parser Errors:\n")
    assert "Syntax tree is empty" in data["treeDot"]


def test_parser_accepts_empty_string_as_input(client):
    data = client.post('/parser', json={"input": ""}).get_json()
    assert data["success"] is False
    assert len(data["syntax_errors"]) == 1


def test_parser_validates_payload(client):
    assert client.post('/parser', json={}).status_code == 400
    assert client.post('/parser', json={"input": 3}).status_code == 400
    assert client.post('/parser', json={"input": "a", "declarations": ["f"]}).status_code == 400


def test_parser_handles_long_chains(client):
    response = client.post('/parser', json={"input": " + ".join(["a"] * 1000)})
    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["treeDot"].count(" -> ") == 1998


def test_bad_requests_carry_html_error(client):
    data = client.post('/parser', json={"input": 3}).get_json()
    assert data["error"] == "Input must be a string"
    assert '<p class="error-text">Input must be a string</p>' in data["errorHtml"]

    data = client.post('/first-follow', json={"non_terminals": ["S"]}).get_json()
    assert data["success"] is False
    assert "&#x27;terminals&#x27;" in data["errorHtml"]
