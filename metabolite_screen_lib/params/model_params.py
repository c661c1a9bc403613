# Fixed presets for small metabolomics tables (~80 subjects, ~60 metabolites)
FIXED_PARAM_PRESETS = {
    # Logistic regression, L2 penalty
    "Logit": dict(
        C=1.0,
        penalty='l2',
        max_iter=10000,
        solver='lbfgs',
    ),

    # Logistic regression, L1 penalty (sparse coefficients)
    "Logit_l1": dict(
        C=0.5,
        penalty='l1',
        max_iter=10000,
        solver='liblinear',
    ),

    # LGBM classifier - small data, so tiny leaves and few trees
    "LGBM_classifier": dict(
        objective="binary",
        n_estimators=200,
        learning_rate=0.05,
        max_depth=3,
        num_leaves=7,
        min_child_samples=5,
        subsample=0.8,
        subsample_freq=1,
        colsample_bytree=0.5,
        n_jobs=1,
        verbose=-1,
    ),

    # XGB classifier
    "XGB_classifier": dict(
        n_estimators=200,
        learning_rate=0.05,
        max_depth=3,
        subsample=0.8,
        colsample_bytree=0.5,
        n_jobs=1,
        verbosity=0,
    ),
}
