from netdesign.conversation import (
    DEFAULT_QUESTIONS,
    default_context,
    design_inputs_from_collected_info,
    extract_fields,
    merge_context,
    next_question,
    stage_for,
    track_reply,
)
from netdesign.topology import MAX_COMPANY_SIZE, MAX_OFFICE_USERS


def test_extract_fields_is_case_insensitive_and_trimmed():
    reply = "Summary so far:\nCompany Size:   250 employees  \nINDUSTRY: Healthcare\nnothing else"
    assert extract_fields(reply) == {"companySize": "250 employees", "industryType": "Healthcare"}


def test_reply_without_matches_adds_nothing():
    context = default_context()
    updated = track_reply("Could you tell me more about your office?", context)
    assert updated["collectedInfo"] == {}
    assert updated["questions"] == DEFAULT_QUESTIONS
    assert updated["stage"] == "gathering"


def test_three_keys_gather_four_keys_recommend():
    three = {"companySize": "10", "industryType": "Retail", "locations": "2"}
    assert stage_for(three) == "gathering"
    assert stage_for(dict(three, requiredUptime="99.9%")) == "recommending"


def test_track_reply_merges_and_recommends():
    context = {
        "questions": list(DEFAULT_QUESTIONS),
        "collectedInfo": {"companySize": "50", "industryType": "Finance", "locations": "3"},
        "stage": "gathering",
    }
    updated = track_reply("Uptime: 99.99%", context)
    assert updated["collectedInfo"]["requiredUptime"] == "99.99%"
    assert updated["stage"] == "recommending"
    # caller's context is untouched
    assert "requiredUptime" not in context["collectedInfo"]


def test_new_values_overwrite_old_ones():
    context = {"collectedInfo": {"companySize": "50"}}
    updated = track_reply("company size: 75", context)
    assert updated["collectedInfo"]["companySize"] == "75"


def test_questions_filtered_by_attribute_substring():
    updated = track_reply("Locations: 4", default_context())
    assert "How many physical locations do you have?" not in updated["questions"]
    assert len(updated["questions"]) == len(DEFAULT_QUESTIONS) - 1


def test_stage_never_moves_backwards_as_info_grows():
    order = {"initial": 0, "gathering": 1, "recommending": 2}
    context = default_context()
    replies = [
        "Company size: 20",
        "Industry: Legal",
        "Nothing useful here",
        "Locations: 1",
        "Users: 20",
        "Security: GDPR",
        "Thanks!",
    ]
    previous = order[context["stage"]]
    for reply in replies:
        context = track_reply(reply, context)
        assert order[context["stage"]] >= previous
        previous = order[context["stage"]]
    assert context["stage"] == "recommending"


def test_merge_context_overlays_partial_context():
    merged = merge_context({"collectedInfo": {"locations": "2"}, "stage": "bogus"})
    assert merged["collectedInfo"] == {"locations": "2"}
    assert merged["questions"] == DEFAULT_QUESTIONS
    assert merged["stage"] == "initial"


def test_next_question():
    assert next_question(default_context()) == DEFAULT_QUESTIONS[0]
    assert next_question({"questions": []}) is None
    assert next_question(None) is None


def test_design_inputs_from_collected_info():
    inputs = design_inputs_from_collected_info({
        "companySize": "about 120 staff",
        "estimatedUsers": "roughly 1,300 users",
        "industryType": "Retail",
    })
    assert inputs == {"formData": {"companySize": 120, "officeUsers": 1300}, "departments": []}
    assert design_inputs_from_collected_info(None)["formData"] == {"companySize": 0, "officeUsers": 0}


def test_design_inputs_are_capped_like_the_form():
    inputs = design_inputs_from_collected_info({
        "companySize": "12,000 employees",
        "estimatedUsers": "100000000",
    })
    assert inputs["formData"] == {"companySize": MAX_COMPANY_SIZE, "officeUsers": MAX_OFFICE_USERS}
